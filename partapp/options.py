"""
Option resolution: which flavor of carrier the decorator's tokens ask for.

	(nothing)        monomorphic; each thunk used once; no duplication.
	poly             polymorphic; thunks shared and repeatable.
	poly, Clone      polymorphic, and a carrier may be duplicated mid-chain.

Bad combinations get a diagnostic but never stop generation; the mode is
whatever can be inferred from the tokens that make sense.
"""
from typing import NamedTuple, Sequence
from .diagnostics import Report
from .ontology import Phrase

POLY = "poly"
CLONE = "Clone"

class Mode(NamedTuple):
	polymorphic: bool = False
	duplicable: bool = False

	def describe(self):
		if not self.polymorphic: return "monomorphic"
		return "polymorphic, duplicable" if self.duplicable else "polymorphic"

MONOMORPHIC = Mode()

def resolve_options(tokens:Sequence[tuple[str, Phrase]], report:Report) -> Mode:
	"""
	Each token comes paired with the phrase a complaint about it should point at.
	"""
	texts = [text for text, site in tokens]
	polymorphic = POLY in texts
	duplicable = False
	for text, site in tokens:
		if text == POLY: continue
		elif text == CLONE:
			if polymorphic: duplicable = True
			else: report.clone_without_poly(site)
		elif polymorphic: report.only_clone_with_poly(site, text)
		else: report.only_poly_accepted(site, text)
	return Mode(polymorphic, duplicable)
