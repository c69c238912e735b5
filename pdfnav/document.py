"""
In-memory model of a PDF document opened as text.

PDF files are decoded as latin-1, so that every byte maps to exactly one
character, and the byte offsets recorded in a cross-reference table can be
used as character offsets into :attr:`TextDocument.text`.
"""

import bisect
from dataclasses import dataclass
from typing import List

from pdfnav.pdf_utils.misc import LINE_BREAK

__all__ = ['Position', 'TextDocument', 'PDF_TEXT_ENCODING']

PDF_TEXT_ENCODING = 'latin-1'


@dataclass(frozen=True, order=True)
class Position:
    """
    A zero-based line/column position in a document.
    """

    line: int
    column: int


class TextDocument:
    """
    A document identified by ``document_id`` (usually a path or URI),
    together with its full text.

    :param document_id:
        Identifier of the document.
    :param text:
        The full text of the document.
    """

    def __init__(self, document_id: str, text: str):
        self.document_id = document_id
        self.text = text
        # offsets of the first character of every line
        self._line_starts: List[int] = [0]
        self._line_starts.extend(m.end() for m in LINE_BREAK.finditer(text))

    @classmethod
    def from_file(cls, path: str) -> 'TextDocument':
        with open(path, 'rb') as inf:
            data = inf.read()
        return cls(path, data.decode(PDF_TEXT_ENCODING))

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_text(self, line: int) -> str:
        """
        Return the text of a line, without its line break.

        :raises IndexError:
            if the line does not exist.
        """
        if not 0 <= line < self.line_count:
            raise IndexError(f"Line {line} out of range")
        start = self._line_starts[line]
        if line + 1 < self.line_count:
            end = self._line_starts[line + 1]
            return LINE_BREAK.sub('', self.text[start:end])
        return self.text[start:]

    def position_at(self, offset: int) -> Position:
        """
        Convert an offset into the document's text into a position.
        Offsets outside the text are clamped to its bounds, and offsets
        inside a line break map to the end of the line.
        """
        offset = min(max(offset, 0), len(self.text))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        column = offset - self._line_starts[line]
        return Position(line, min(column, len(self.line_text(line))))

    def offset_at(self, position: Position) -> int:
        """
        Convert a position into an offset into the document's text.
        Lines are clamped to the document, columns to the line.
        """
        line = min(max(position.line, 0), self.line_count - 1)
        line_len = len(self.line_text(line))
        column = min(max(position.column, 0), line_len)
        return self._line_starts[line] + column

    def __repr__(self):
        return f'TextDocument({self.document_id!r})'
