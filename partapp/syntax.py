"""
The function-description model.

The front end wraps whatever `ast` node it finds in an Item; the signature
analyzer turns a function Item into a FunctionDescription, which is what
every synthesizer consumes. Class-level type annotations keep the IDE
honest about fields filled in after construction.
"""
import ast
from typing import Optional, Sequence, Callable
from .location import SourceFile, node_span, name_span
from .ontology import Phrase, Nom

POSITIONAL_ONLY = "positional-only"
POSITIONAL_OR_KEYWORD = "positional-or-keyword"
KEYWORD_ONLY = "keyword-only"
VAR_POSITIONAL = "var-positional"
VAR_KEYWORD = "var-keyword"

class Item(Phrase):
	""" Some definition the front end found, not yet known to be a function. """
	node: ast.AST
	source: SourceFile
	decorator: Optional[ast.expr]  # The part_app decorator, when it can be found.
	in_class: bool  # Defined directly within a class body.

	def __init__(self, node:ast.AST, source:SourceFile, decorator=None, in_class=False):
		self.node, self.source, self.decorator = node, source, decorator
		self.in_class = in_class

	def __repr__(self): return "<Item %s>" % type(self.node).__name__

	def is_function(self):
		return isinstance(self.node, (ast.FunctionDef, ast.AsyncFunctionDef))

	def name(self) -> Nom:
		text = getattr(self.node, "name", None)
		if text is None:
			return Nom(type(self.node).__name__, self.span())
		return Nom(text, name_span(self.source, self.node, text))

	def span(self):
		return node_span(self.source, self.node)

	def decorator_site(self) -> Phrase:
		if self.decorator is None: return self.name()
		return Nom("part_app", node_span(self.source, self.decorator))

class TypeParameter(Phrase):
	""" One of the function's own generic parameters. """
	kind: str  # TypeVar, ParamSpec, or TypeVarTuple

	def __init__(self, nom:Nom, kind:str):
		self.nom, self.kind = nom, kind
	def __repr__(self): return "<%s %s>" % (self.kind, self.nom.text)
	def span(self): return self.nom.span()

	def declaration(self) -> str:
		""" As written between the brackets of a generic class or function. """
		if self.kind == "ParamSpec": return "**" + self.nom.text
		return self.generic_argument()

	def generic_argument(self) -> str:
		if self.kind == "TypeVarTuple": return "*" + self.nom.text
		return self.nom.text

class Parameter(Phrase):
	nom: Nom
	annotation: Optional[str]   # Source text of the annotation, never evaluated.
	kind: str

	def __init__(self, nom:Nom, annotation:Optional[str], kind:str):
		self.nom, self.annotation, self.kind = nom, annotation, kind
	def __repr__(self): return "<Parameter %s:%s>" % (self.nom.text, self.annotation)
	def span(self): return self.nom.span()

	def value_type(self) -> str:
		return self.annotation or "Any"

class FunctionDescription(Phrase):
	"""
	The normalized signature: no receiver, no bounded type parameters,
	no variadic parameters. Parameter order is declaration order.
	"""
	nom: Nom
	type_params: Sequence[TypeParameter]
	params: Sequence[Parameter]
	returns: Optional[str]
	is_async: bool
	item: Item
	body: Optional[Callable]   # The live function, when decorating one at run time.

	def __init__(self, nom, type_params, params, returns, is_async, item, body=None):
		self.nom = nom
		self.type_params = tuple(type_params)
		self.params = tuple(params)
		self.returns = returns
		self.is_async = is_async
		self.item = item
		self.body = body

	def __repr__(self):
		return "<FunctionDescription %s(%s)>" % (self.nom.text, ", ".join(p.nom.text for p in self.params))

	def span(self): return self.nom.span()

	def name(self) -> str: return self.nom.text
	def arity(self) -> int: return len(self.params)
	def param_names(self): return [p.nom.text for p in self.params]
