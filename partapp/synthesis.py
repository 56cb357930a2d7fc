"""
The synthesizers: they write the Python source of a partially applicable function.

For a function `f` the generated definitions are, in order:

	f___Empty, f___Added          marker classes, only ever used as type arguments
	f___<param>___L               one label type variable per parameter
	PartialApplication___f        the carrier, with one setter per parameter and `call`
	f___body                      the original function, when expanding source text
	f                             the constructor, named like the original

Each synthesizer returns a list of lines. The annotations spell out the
fill-state machine for a static checker: a setter's `self` must carry the
Empty label for its own parameter, and `call` wants Added everywhere. The
generated module uses postponed annotations, so none of them is ever
evaluated at run time.

A function with type parameters of its own was written in the bracket
syntax, so its carrier and constructor are too, and the label variables
are declared in the carrier's brackets instead of at module level.
"""
import ast, copy
from typing import Optional, Sequence

from . import states, syntax
from .options import Mode

INDENT = "    "
RUNTIME_MODULE = "partapp.runtime"

class Names:
	"""
	The mangling scheme for everything generated on behalf of one function.
	The stem is the function's name unless the definitions must be moved out
	of a class body, in which case it is qualified by the class.
	"""
	def __init__(self, fn:syntax.FunctionDescription, stem:Optional[str]=None):
		self.fn = fn
		self.function = stem or fn.name()
		self.carrier = "PartialApplication___%s" % self.function
		self.body = "%s___body" % self.function
		self.marker = {label: "%s___%s" % (self.function, label) for label in states.LABELS}

	def label_var(self, param:syntax.Parameter):
		return "%s___%s___L" % (self.function, param.nom.text)

	@staticmethod
	def slot(param:syntax.Parameter): return "thunk___%s" % param.nom.text

	def carrier_type(self, pattern:Sequence[Optional[str]]) -> str:
		"""
		Spell the carrier instantiated at some pattern of labels.
		A None in the pattern leaves that parameter's label free.
		"""
		args = [tp.generic_argument() for tp in self.fn.type_params]
		for param, label in zip(self.fn.params, pattern):
			args.append(self.label_var(param) if label is None else self.marker[label])
		if not args: return self.carrier
		return "%s[%s]" % (self.carrier, ", ".join(args))

def _tuple_literal(items:Sequence[str]) -> str:
	if len(items) == 1: return "(%r,)" % items[0]
	return "(%s)" % ", ".join(map(repr, items))

def _indent(lines:Sequence[str]) -> list[str]:
	return [INDENT+line if line else line for line in lines]

def banner(fns:Sequence[syntax.FunctionDescription]) -> str:
	""" A docstring for a generated module that has none of its own. """
	return '"""Partially applicable %s, generated by partapp."""' % (", ".join(fn.name() for fn in fns) or "nothing")

def imports(fns:Sequence[syntax.FunctionDescription]) -> list[str]:
	typing_names = {"Any", "Callable", "Generic", "Optional", "TypeVar"}
	if any(fn.is_async for fn in fns): typing_names.add("Coroutine")
	return [
		"from __future__ import annotations",
		"from typing import %s" % ", ".join(sorted(typing_names)),
		"from %s import Carrier, FillLabel, SharedThunk, Thunk" % RUNTIME_MODULE,
	]

def markers(names:Names) -> list[str]:
	lines = []
	for label, meaning in ((states.EMPTY, "has not been supplied"), (states.ADDED, "has been supplied")):
		lines.extend([
			"class %s(FillLabel):" % names.marker[label],
			INDENT+'"""Fill label for %s: this parameter %s."""' % (names.function, meaning),
			INDENT+"__slots__ = ()",
			"",
			"",
		])
	return lines

def type_variables(names:Names) -> list[str]:
	if names.fn.type_params: return []
	return ["%s = TypeVar(%r)" % (names.label_var(p), names.label_var(p)) for p in names.fn.params]

def aggregate(names:Names, mode:Mode, members:Sequence[str]) -> list[str]:
	""" The carrier class. `members` are the already-synthesized methods. """
	fn = names.fn
	labels = [names.label_var(p) for p in fn.params]
	if fn.type_params:
		brackets = [tp.declaration() for tp in fn.type_params] + labels
		head = "class %s[%s](Carrier):" % (names.carrier, ", ".join(brackets))
	elif labels:
		head = "class %s(Carrier, Generic[%s]):" % (names.carrier, ", ".join(labels))
	else:
		head = "class %s(Carrier):" % names.carrier
	slots = [Names.slot(p) for p in fn.params]
	body = ["__slots__ = %s" % _tuple_literal(slots)]
	for param in fn.params:
		if mode.polymorphic: slot_type = "Optional[SharedThunk]"
		else: slot_type = "Optional[Thunk[%s]]" % param.value_type()
		body.append("%s: %s" % (Names.slot(param), slot_type))
	body.extend([
		"parameters = %s" % _tuple_literal(fn.param_names()),
		"slot_names = %s" % _tuple_literal(slots),
		"labels = (%s, %s)" % (names.marker[states.EMPTY], names.marker[states.ADDED]),
		"polymorphic = %r" % mode.polymorphic,
		"duplicable = %r" % mode.duplicable,
	])
	for member in members:
		body.append("")
		body.extend(member)
	return [head] + _indent(body)

def constructor(names:Names, decorators:Sequence[ast.expr]=()) -> list[str]:
	""" Decorators written above part_app apply to the constructor. """
	fn = names.fn
	signature = ", ".join(p.nom.text for p in fn.params)
	brackets = "[%s]" % ", ".join(tp.declaration() for tp in fn.type_params) if fn.type_params else ""
	lines = ["@%s" % ast.unparse(d) for d in decorators]
	lines.extend([
		"def %s%s() -> %s:" % (names.function, brackets, names.carrier_type(states.initial_state(fn.arity()))),
		INDENT+'"""Start supplying thunks for %s(%s)."""' % (fn.name(), signature),
		INDENT+"return %s(%s)" % (names.carrier, names.body),
	])
	return lines

def setters(names:Names, mode:Mode) -> list[list[str]]:
	""" One method per parameter, each defined only where that parameter's label is Empty. """
	fn = names.fn
	methods = []
	for transition in states.transitions(fn.param_names()):
		param = fn.params[transition.position]
		name = param.nom.text
		if mode.polymorphic:
			producer_type, wrap = "Callable[[], Any]", "SharedThunk.of(producer)"
		else:
			producer_type, wrap = "Callable[[], %s]" % param.value_type(), "Thunk(producer)"
		methods.append([
			"def %s(self: %s, producer: %s) -> %s:" % (
				name, names.carrier_type(transition.pre), producer_type, names.carrier_type(transition.post)
			),
			INDENT+"self._vacant(%d)" % transition.position,
			INDENT+"self.%s = %s" % (Names.slot(param), wrap),
			INDENT+"return self._relabel(%d)" % transition.position,
		])
	return methods

def final_call(names:Names) -> list[str]:
	fn = names.fn
	returns = fn.returns or "Any"
	if fn.is_async: returns = "Coroutine[Any, Any, %s]" % returns
	args = []
	for index, param in enumerate(fn.params):
		value = "thunks___[%d].force()" % index
		if param.kind == syntax.KEYWORD_ONLY: value = "%s=%s" % (param.nom.text, value)
		args.append(value)
	return [
		"def call(self: %s) -> %s:" % (names.carrier_type(states.terminal_state(fn.arity())), returns),
		INDENT+"body___, thunks___ = self._consume()",
		INDENT+"return body___(%s)" % ", ".join(args),
	]

def duplicator(names:Names) -> list[str]:
	free = names.carrier_type((None,) * names.fn.arity())
	return [
		"def clone(self: %s) -> %s:" % (free, free),
		INDENT+"return self._duplicate()",
		"",
		"__copy__ = clone",
	]

def body_definition(names:Names, decorators:Sequence[ast.expr]=()) -> list[str]:
	"""
	The original function, renamed, for expanded source text.
	It keeps only the decorators written below part_app.
	"""
	node = copy.copy(names.fn.item.node)
	node.name = names.body
	node.decorator_list = list(decorators)
	return ast.unparse(node).splitlines()

def definitions(
	fn:syntax.FunctionDescription, mode:Mode, include_body:bool, stem:Optional[str]=None,
	decorators:Sequence[ast.expr]=(), body_decorators:Sequence[ast.expr]=(),
) -> list[str]:
	""" Everything generated for one function, less the imports. """
	names = Names(fn, stem)
	members = setters(names, mode)
	members.append(final_call(names))
	if mode.duplicable: members.append(duplicator(names))
	lines = markers(names)
	variables = type_variables(names)
	if variables: lines.extend(variables + ["", ""])
	lines.extend(aggregate(names, mode, members) + ["", ""])
	if include_body: lines.extend(body_definition(names, body_decorators) + ["", ""])
	lines.extend(constructor(names, decorators))
	return lines

def assemble(jobs:Sequence[tuple[syntax.FunctionDescription, Mode]]) -> str:
	"""
	One module of generated source for functions whose bodies already
	exist in the namespace it will run in.
	"""
	fns = [fn for fn, mode in jobs]
	lines = [banner(fns)] + imports(fns) + ["", ""]
	for fn, mode in jobs:
		lines.extend(definitions(fn, mode, include_body=False) + ["", ""])
	return "\n".join(lines).rstrip() + "\n"
