"""
These most-fundamental classes in the syntax class hierarchy are separate
from the rest so the diagnostics module can depend on them without
dragging in the whole function-description model.
"""
from .location import Span, NOWHERE

class Phrase:
	""" Anything a diagnostic can point at. """
	def span(self) -> Span:
		raise NotImplementedError(type(self))

class Nom(Phrase):
	""" Representing the occurrence of a name anywhere. """
	def __init__(self, text:str, where:Span=NOWHERE):
		assert isinstance(text, str)
		assert isinstance(where, Span), type(where)
		self.text, self._where = text, where
	def __repr__(self): return "<Name %r>" % self.text
	def span(self): return self._where