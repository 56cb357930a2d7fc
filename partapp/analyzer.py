"""
The signature analyzer validates a function item and normalizes it into a FunctionDescription.

Every rule violation gets exactly one diagnostic and generation carries on:
a receiver is dropped, a bound or constraint on a type parameter is ignored,
and a variadic parameter is left out. What remains is a plain list of
single-valued parameters, which is all the synthesizers know how to handle.
"""
import ast
from boozetools.support.foundation import Visitor

from . import syntax
from .diagnostics import Report
from .location import node_span, name_span
from .ontology import Nom
from .runtime import RESERVED_NAMES

def _is_staticmethod(node) -> bool:
	for decorator in node.decorator_list:
		if isinstance(decorator, ast.Name) and decorator.id == "staticmethod": return True
	return False

class SignatureAnalyzer(Visitor):
	""" Walks the `ast` of one function; each visit_X is named for the node class it handles. """

	def __init__(self, report:Report):
		self.report = report

	def analyze(self, item:syntax.Item, body=None) -> syntax.FunctionDescription:
		assert item.is_function(), item
		return self.visit(item.node, item, body)

	def visit_FunctionDef(self, node:ast.FunctionDef, item:syntax.Item, body):
		return self._describe(node, item, body, is_async=False)

	def visit_AsyncFunctionDef(self, node:ast.AsyncFunctionDef, item:syntax.Item, body):
		return self._describe(node, item, body, is_async=True)

	def _describe(self, node, item:syntax.Item, body, is_async:bool):
		type_params = [self.visit(tp, item) for tp in getattr(node, "type_params", ())]
		params = self.visit(node.args, item)
		params = self._drop_receiver(node, item, params)
		params = [p for p in params if self._single_valued(p)]
		for p in params: self._check_name(p)
		returns = ast.unparse(node.returns) if node.returns is not None else None
		return syntax.FunctionDescription(item.name(), type_params, params, returns, is_async, item, body)

	def _drop_receiver(self, node, item:syntax.Item, params:list[syntax.Parameter]):
		if not params: return params
		first = params[0]
		if first.kind not in (syntax.POSITIONAL_ONLY, syntax.POSITIONAL_OR_KEYWORD): return params
		if item.in_class and not _is_staticmethod(node):
			self.report.cannot_make_methods(first.nom)
			return params[1:]
		return params

	def _single_valued(self, param:syntax.Parameter) -> bool:
		if param.kind in (syntax.VAR_POSITIONAL, syntax.VAR_KEYWORD):
			self.report.variadic_parameter(param.nom)
			return False
		return True

	def _check_name(self, param:syntax.Parameter):
		text = param.nom.text
		if text in RESERVED_NAMES:
			self.report.reserved_parameter_name(param.nom, "the carrier already has a member by that name")
		elif text.startswith("__") and not text.endswith("__"):
			self.report.reserved_parameter_name(param.nom, "Python would mangle it inside the carrier class")

	def visit_arguments(self, args:ast.arguments, item:syntax.Item) -> list[syntax.Parameter]:
		def param(arg:ast.arg, kind:str):
			annotation = ast.unparse(arg.annotation) if arg.annotation is not None else None
			return syntax.Parameter(Nom(arg.arg, node_span(item.source, arg)), annotation, kind)
		params = [param(a, syntax.POSITIONAL_ONLY) for a in args.posonlyargs]
		params.extend(param(a, syntax.POSITIONAL_OR_KEYWORD) for a in args.args)
		if args.vararg is not None: params.append(param(args.vararg, syntax.VAR_POSITIONAL))
		params.extend(param(a, syntax.KEYWORD_ONLY) for a in args.kwonlyargs)
		if args.kwarg is not None: params.append(param(args.kwarg, syntax.VAR_KEYWORD))
		return params

	# PEP 695 type parameters. Each kind visits to a TypeParameter.

	def _type_param(self, tp, item:syntax.Item, kind:str) -> syntax.TypeParameter:
		return syntax.TypeParameter(Nom(tp.name, name_span(item.source, tp, tp.name)), kind)

	def visit_TypeVar(self, tp, item:syntax.Item):
		it = self._type_param(tp, item, "TypeVar")
		if tp.bound is not None:
			clause = Nom(ast.unparse(tp.bound), node_span(item.source, tp.bound))
			self.report.where_clause(clause, it.nom)
		return it

	def visit_ParamSpec(self, tp, item:syntax.Item):
		return self._type_param(tp, item, "ParamSpec")

	def visit_TypeVarTuple(self, tp, item:syntax.Item):
		return self._type_param(tp, item, "TypeVarTuple")
