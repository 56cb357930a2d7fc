"""
The syntax-analysis service.

Python's own `ast` module does the parsing. This module's job is to find the
definition a decorator was applied to (or every decorated definition in a
file), wrap it as a syntax.Item with its source file, and read the option
tokens off the decorator. Anything that cannot be parsed or located is fatal.
"""
import ast, inspect, linecache
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

from . import syntax
from .location import SourceFile, node_span
from .ontology import Nom

DECORATOR_NAME = "part_app"

class PartAppParseError(Exception):
	""" The input could not be turned into a function description at all. """
	pass

def parse_text(text:str, path:Optional[Path]=None) -> tuple[ast.Module, SourceFile]:
	""" Submit text to the parser. Syntax errors are fatal. """
	source = SourceFile(text, path)
	try: module = ast.parse(text, filename=str(path or "<string>"))
	except SyntaxError as ex:
		raise PartAppParseError("Failed to parse input: %s" % ex) from ex
	return module, source

@lru_cache(8)
def _parse_cached(text:str, filename:str):
	return parse_text(text, Path(filename))

def is_part_app(decorator:ast.expr) -> bool:
	target = decorator.func if isinstance(decorator, ast.Call) else decorator
	if isinstance(target, ast.Name): return target.id == DECORATOR_NAME
	if isinstance(target, ast.Attribute): return target.attr == DECORATOR_NAME
	return False

def _find_decorator(node) -> Optional[ast.expr]:
	for decorator in getattr(node, "decorator_list", ()):
		if is_part_app(decorator): return decorator
	return None

def _definitions(node, in_class=False) -> Iterator[tuple[ast.AST, bool]]:
	""" Every function and class definition, with whether it sits directly in a class body. """
	for child in ast.iter_child_nodes(node):
		if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
			yield child, in_class
			yield from _definitions(child, False)
		elif isinstance(child, ast.ClassDef):
			yield child, in_class
			yield from _definitions(child, True)
		else:
			yield from _definitions(child, in_class)

def _first_line(node) -> int:
	return min([d.lineno for d in getattr(node, "decorator_list", ())] + [node.lineno])

def decorated_items(module:ast.Module, source:SourceFile) -> list[syntax.Item]:
	""" Every definition in a module that carries the part_app decorator, in source order. """
	found = []
	for node, in_class in _definitions(module):
		decorator = _find_decorator(node)
		if decorator is not None:
			found.append(syntax.Item(node, source, decorator, in_class))
	return found

def item_for_object(obj) -> syntax.Item:
	"""
	Find the definition of a live function (or class) in its source file.
	The whole file gets parsed so that spans line up with what the user sees.
	"""
	try:
		filename = inspect.getsourcefile(obj)
	except TypeError as ex:
		raise PartAppParseError("No source is available for %r" % (obj,)) from ex
	if filename is None:
		raise PartAppParseError("No source file is known for %r" % (obj,))
	module_globals = getattr(obj, "__globals__", None)
	text = ''.join(linecache.getlines(filename, module_globals))
	if not text:
		raise PartAppParseError("Could not read the source of %r from %s" % (obj, filename))
	module, source = _parse_cached(text, filename)
	name = getattr(obj, "__name__", None)
	code = getattr(obj, "__code__", None)
	if code is not None:
		first_line = code.co_firstlineno
	else:
		try: first_line = inspect.getsourcelines(obj)[1]
		except (OSError, TypeError) as ex:
			raise PartAppParseError("Could not locate %r in %s" % (obj, filename)) from ex
	for node, in_class in _definitions(module):
		if node.name == name and _first_line(node) == first_line:
			return syntax.Item(node, source, _find_decorator(node), in_class)
	raise PartAppParseError("Could not find the definition of %s in %s" % (name, filename))

def split_decorators(item:syntax.Item) -> tuple[list[ast.expr], list[ast.expr]]:
	""" The decorators written above part_app, and those written below it. """
	decorators = item.node.decorator_list
	at = next(i for i, d in enumerate(decorators) if d is item.decorator)
	return decorators[:at], decorators[at+1:]

def option_tokens(item:syntax.Item) -> list[tuple[str, Nom]]:
	""" The option tokens written on an item's decorator, each with where it was written. """
	decorator = item.decorator
	if not isinstance(decorator, ast.Call): return []
	tokens = []
	for arg in decorator.args:
		if isinstance(arg, ast.Constant) and isinstance(arg.value, str): text = arg.value
		elif isinstance(arg, ast.Name): text = arg.id
		else: text = ast.unparse(arg)
		tokens.append((text, Nom(text, node_span(item.source, arg))))
	return tokens
