"""
The invocation surface.

`part_app` decorates a function at import time: it finds the definition in
its source file, analyzes the signature, writes the carrier's source, and
executes that source next to the original function, which becomes the body.
The decorator returns the constructor, so the name now starts a chain:

	@part_app
	def add(a: int, b: int) -> int:
		return a + b

	add().b(lambda: 3).a(lambda: 2).call()  # 5

`expand_source` does the same work on the text of a whole module without
running anything, for the command line: each decorated definition is
replaced where it stands, and the rest of the module comes through as is.
"""
import ast, inspect
from pathlib import Path
from typing import Optional

from . import front_end, synthesis
from .analyzer import SignatureAnalyzer
from .diagnostics import Report
from .options import Mode, resolve_options
from .syntax import FunctionDescription

def part_app(*tokens, report:Optional[Report]=None):
	"""
	Use bare (`@part_app`) or with option tokens (`@part_app("poly", "Clone")`).
	Pass `report=` to collect the diagnostics instead of printing them.
	"""
	if len(tokens) == 1 and not isinstance(tokens[0], str):
		return _apply(tokens[0], (), report)
	def decorate(item):
		return _apply(item, tokens, report)
	return decorate

def _apply(obj, tokens, report:Optional[Report]):
	own_report = report is None
	if own_report: report = Report()
	try: return _generate(obj, tokens, report)
	finally:
		if own_report and report.sick(): report.complain_to_console()

def _describe_item(obj) -> str:
	if inspect.isclass(obj): return "a class"
	return "a %s object" % type(obj).__name__

def _generate(obj, tokens, report:Report):
	if not inspect.isfunction(obj):
		try: site = front_end.item_for_object(obj).name()
		except front_end.PartAppParseError: site = None
		report.not_a_function(site, _describe_item(obj))
		return obj
	item = front_end.item_for_object(obj)
	site = item.decorator_site()
	mode = resolve_options([(str(token), site) for token in tokens], report)
	description = SignatureAnalyzer(report).analyze(item, obj)
	report.info("part_app: %s is %s with %d parameter(s)" % (description.name(), mode.describe(), description.arity()))
	return build(description, mode)

def build(description:FunctionDescription, mode:Mode):
	"""
	Execute the generated source with the live function standing in as the body.
	The constructor comes back carrying its carrier class and the source text.
	"""
	fn = description.body
	names = synthesis.Names(description)
	source = synthesis.assemble([(description, mode)])
	namespace = {"__name__": fn.__module__, names.body: fn}
	exec(compile(source, "<part_app %s>" % fn.__qualname__, "exec"), namespace)
	constructor = namespace[names.function]
	constructor.__qualname__ = fn.__qualname__
	if fn.__doc__: constructor.__doc__ = fn.__doc__
	constructor.carrier = namespace[names.carrier]
	constructor.source = source
	return constructor


def expand_source(text:str, path:Optional[Path], report:Report) -> str:
	"""
	Re-emit a module's text with every part_app definition replaced, in place,
	by what it generates. Each original body comes along, renamed, so the
	result runs without partapp's decorator. Everything else in the module
	keeps its place. A non-function item loses its part_app decorator and
	is otherwise left alone.
	"""
	module, source = front_end.parse_text(text, path)
	plans = {}
	for item in front_end.decorated_items(module, source):
		mode = resolve_options(front_end.option_tokens(item), report)
		if not item.is_function():
			report.not_a_function(item.name(), "a class")
			plans[item.node] = (item, None, mode)
			continue
		description = SignatureAnalyzer(report).analyze(item)
		report.info("%s: %s is %s with %d parameter(s)" % (path, description.name(), mode.describe(), description.arity()))
		plans[item.node] = (item, description, mode)
	module.body = _Expansion(plans).scope(module.body)
	fns = [description for item, description, mode in plans.values() if description is not None]
	if fns:
		at = _preamble(module.body)
		module.body[at:at] = _statements(synthesis.imports(fns))
		if not _is_docstring(module.body[0]): module.body[:0] = _statements([synthesis.banner(fns)])
	return ast.unparse(module) + "\n"

def _statements(lines) -> list[ast.stmt]:
	return ast.parse("\n".join(lines)).body

def _is_docstring(stmt) -> bool:
	return isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str)

def _preamble(body) -> int:
	""" How many statements must stay ahead of generated imports: a docstring and any future imports. """
	at = 1 if body and _is_docstring(body[0]) else 0
	while at < len(body) and isinstance(body[at], ast.ImportFrom) and body[at].module == "__future__": at += 1
	return at

def _qualify(owner:Optional[str], name:str) -> str:
	return name if owner is None else "%s___%s" % (owner, name)

class _Expansion:
	"""
	Walks statement lists, replacing each planned definition.

	A function body, like the module itself, is a scope. A class body is not:
	names bound there are invisible to the functions generated within it. So
	definitions generated for an item in a class body move out to the nearest
	scope, just ahead of the statement that holds the class, under names
	qualified by the class. The class keeps only an assignment of the
	constructor, with any decorators written above part_app applied.
	"""

	def __init__(self, plans:dict):
		self.plans = plans

	def scope(self, body:list) -> list:
		result = []
		for stmt in body:
			hoisted, replacement = self.statement(stmt, None)
			result.extend(hoisted)
			result.extend(replacement)
		return result

	def block(self, body:list, owner:Optional[str]) -> tuple[list, list]:
		hoisted, result = [], []
		for stmt in body:
			more, replacement = self.statement(stmt, owner)
			hoisted.extend(more)
			result.extend(replacement)
		return hoisted, result

	def nested(self, node, owner:Optional[str]) -> list:
		""" The statement lists inside a compound statement, such as if, try, with, or match. """
		hoisted = []
		for field, value in ast.iter_fields(node):
			if not isinstance(value, list): continue
			if value and all(isinstance(v, ast.stmt) for v in value):
				more, replacement = self.block(value, owner)
				hoisted.extend(more)
				setattr(node, field, replacement)
			else:
				for child in value:
					if isinstance(getattr(child, "body", None), list):
						hoisted.extend(self.nested(child, owner))
		return hoisted

	def statement(self, stmt, owner:Optional[str]) -> tuple[list, list]:
		if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
			hoisted, stmt.body = [], self.scope(stmt.body)
		elif isinstance(stmt, ast.ClassDef):
			hoisted, stmt.body = self.block(stmt.body, _qualify(owner, stmt.name))
		else:
			hoisted = self.nested(stmt, owner)
		plan = self.plans.get(stmt)
		if plan is None: return hoisted, [stmt]
		item, description, mode = plan
		outer, inner = front_end.split_decorators(item)
		if description is None:
			stmt.decorator_list = outer + inner
			return hoisted, [stmt]
		if owner is None:
			lines = synthesis.definitions(description, mode, True, decorators=outer, body_decorators=inner)
			return hoisted, _statements(lines)
		stem = _qualify(owner, description.name())
		hoisted.extend(_statements(synthesis.definitions(description, mode, True, stem=stem, body_decorators=inner)))
		value = stem
		for decorator in reversed(outer): value = "%s(%s)" % (ast.unparse(decorator), value)
		return hoisted, _statements(["%s = %s" % (description.name(), value)])
