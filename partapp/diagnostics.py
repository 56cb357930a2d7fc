"""
The sink the generator complains into.

Nothing here stops generation: each complaint becomes a Pic on the Report,
and whoever drives the generator decides when to show them. Only a failure
to parse the input at all is fatal, and that is the front end's business.
"""
import sys, random
from typing import Sequence, Any, Optional
from boozetools.support.failureprone import illustration

from .location import Span
from .ontology import Phrase, Nom

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Hmm, ", "", ""]

	exclamations = [
		'Bother', 'Drat', 'Fiddlesticks', 'Good Grief', 'Great Scott',
		'Heavens', 'Nuts', 'Rats', 'Whoops', 'Yikes',
	]

	resignations = [
		'This function needs another look.',
		'I generated what I could.',
		'The carrier may not behave as you expect.',
		'Please check the notes below.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, exclamations, resignations)))

class Report:
	""" Collects issues; prints them only when asked. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, max_issues:Optional[int]=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	@property
	def issues(self): return tuple(self._issues)

	def issue(self, it:"Pic"):
		self._issues.append(it)
		if self._max_issues and len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	# Methods the front end is likely to call:

	def not_a_function(self, guilty:Optional[Phrase], what:str):
		intro = "Only functions can be partially applied, not %s. For classes, use a builder."%what
		problem = [Annotation(guilty)] if guilty is not None else []
		self.issue(Pic(intro, problem, ["The item passes through unchanged."]))

	# Methods the signature analyzer calls:

	def cannot_make_methods(self, receiver:Nom):
		intro = "Cannot make methods partially applicable."
		problem = [Annotation(receiver, "receiver")]
		footer = [
			"The first parameter of a function defined directly in a class body is its receiver, unless the function is a staticmethod.",
			"Generation continues as if this parameter were absent.",
		]
		self.issue(Pic(intro, problem, footer))

	def where_clause(self, clause:Phrase, param:Nom):
		intro = "part_app does not allow bounds or constraints on type parameters."
		problem = [Annotation(clause, "on "+param.text)]
		footer = ["Generation continues ignoring this clause."]
		self.issue(Pic(intro, problem, footer))

	def variadic_parameter(self, param:Nom):
		intro = "part_app does not support variadic parameters; each slot takes exactly one value."
		problem = [Annotation(param)]
		footer = ["Generation continues without this parameter."]
		self.issue(Pic(intro, problem, footer))

	def reserved_parameter_name(self, param:Nom, why:str):
		intro = "The parameter '%s' cannot name a setter: %s."%(param.text, why)
		self.issue(Pic(intro, [Annotation(param)]))

	# Methods the option resolver calls:

	def clone_without_poly(self, site:Phrase):
		intro = "Cannot implement duplication (Clone) without polymorphic mode (poly)."
		self.issue(Pic(intro, [Annotation(site)]))

	def only_poly_accepted(self, site:Phrase, token:str):
		intro = "Only the polymorphic option 'poly' is accepted; not %r."%token
		self.issue(Pic(intro, [Annotation(site)]))

	def only_clone_with_poly(self, site:Phrase, token:str):
		intro = "Only 'Clone' may accompany the polymorphic option; not %r."%token
		self.issue(Pic(intro, [Annotation(site)]))

class Annotation:
	span: Span
	caption: str
	def __init__(self, node:Phrase, caption:str=""):
		self.span = node.span()
		self.caption = caption
	@property
	def path(self): return self.span.path
	def illustrate(self):
		source = self.span.source.source_text()
		row, col = source.find_row_col(self.span.slice.start)
		single_line = source.line_of_text(row)
		width = self.span.slice.stop - self.span.slice.start
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	def __repr__(self): return "<Pic %r>" % self._intro
	@property
	def intro(self): return self._intro
	def as_text(self):
		lines = [self._intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				lines.append(str(path or "<string>"))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

def _bemoan(issues:Sequence[Any]):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
