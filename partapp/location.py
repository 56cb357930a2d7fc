"""
A light-weight way to pass around spans within the source files that hold decorated functions.
The `ast` module reports positions as (line, byte-column) pairs; diagnostics want character
offsets into the text, so each SourceFile keeps the offsets where its lines begin.
"""
from pathlib import Path
from typing import NamedTuple, Optional
from boozetools.support.failureprone import SourceText

class SourceFile:
	""" The text of one file (or one string of source), and where its lines begin. """
	path: Optional[Path]
	text: str

	def __init__(self, text:str, path:Optional[Path]=None):
		assert isinstance(path, Path) or path is None
		self.text, self.path = text, path
		self._line_starts = [0]
		for index, char in enumerate(text):
			if char == '\n': self._line_starts.append(index+1)
		self._source_text = None

	def __repr__(self): return "<SourceFile %s>"%(self.path or "<string>")

	def offset(self, lineno:int, col_offset:int) -> int:
		""" Character offset of an `ast` position. Lines count from one; columns are in UTF-8 bytes. """
		start = self._line_starts[lineno-1]
		stop = self._line_starts[lineno] if lineno < len(self._line_starts) else len(self.text)
		line = self.text[start:stop]
		return start + len(line.encode("utf-8")[:col_offset].decode("utf-8", errors="ignore"))

	def source_text(self) -> SourceText:
		if self._source_text is None:
			filename = str(self.path) if self.path else None
			self._source_text = SourceText(self.text, filename=filename)
		return self._source_text

class Span(NamedTuple):
	""" Aimed at whatever prints error messages """
	source: SourceFile
	slice: slice

	@property
	def path(self): return self.source.path

NOWHERE = Span(SourceFile(""), slice(0, 0))

def node_span(source:SourceFile, node) -> Span:
	""" The span of any `ast` node that carries position attributes. """
	start = source.offset(node.lineno, node.col_offset)
	end_lineno = getattr(node, "end_lineno", None) or node.lineno
	end_col = getattr(node, "end_col_offset", None)
	if end_col is None: stop = start
	else: stop = source.offset(end_lineno, end_col)
	return Span(source, slice(start, stop))

def name_span(source:SourceFile, node, name:str) -> Span:
	"""
	`ast` gives no position for the name in a `def` or `class` statement,
	so look for it on the line where the statement begins.
	"""
	start = source.offset(node.lineno, node.col_offset)
	found = source.text.find(name, start)
	if found < 0: return node_span(source, node)
	return Span(source, slice(found, found+len(name)))
