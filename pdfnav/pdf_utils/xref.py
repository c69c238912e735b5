"""
Utilities to locate and parse the cross-reference table of a PDF file.

Only classic cross-reference tables are handled, i.e. the ``xref`` keyword
followed by one or more subsections of fixed-width rows and terminated
by the ``trailer`` keyword. Cross-reference streams and ``/Prev`` chains
of incremental updates are not processed.
"""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pdfnav.pdf_utils.misc import (
    PDF_WHITESPACE,
    MalformedTrailerError,
    MalformedXrefError,
    split_lines,
)

__all__ = [
    'XRefType', 'XRefEntry', 'XRefTable',
    'DEFAULT_TAIL_SIZE', 'read_startxref', 'locate_xref_section',
    'parse_xref_table',
]

logger = logging.getLogger(__name__)

DEFAULT_TAIL_SIZE = 50
"""
Number of characters at the end of a file that are searched for the
``startxref`` keyword.
"""

STARTXREF_VALUE = re.compile(r'[ \n\r\t\f\x00]*([0-9]+)')
DIGITS = re.compile(r'[0-9]+')


@enum.unique
class XRefType(enum.Enum):
    """
    Different types of cross-reference table rows.
    """

    FREE = enum.auto()
    """
    A row marked with ``f``.
    """

    STANDARD = enum.auto()
    """
    A row marked with ``n``, pointing to an object in the file body.
    """


@dataclass(frozen=True)
class XRefEntry:
    """
    Value type representing a single cross-reference entry.
    """

    idnum: int
    """
    The number of the object being referenced.
    """

    location: int
    """
    Byte offset of the object's definition. For free entries, this is
    the number of the next free object instead.
    """

    generation: int = 0
    """
    The generation number recorded in the table.
    """

    xref_type: XRefType = XRefType.STANDARD
    """
    The type of cross-reference entry.
    """


class XRefTable:
    """
    Immutable collection of cross-reference entries, in the order in which
    they appear in the table.

    Entries are looked up by object number. If an object number occurs more
    than once, the last row wins.
    """

    def __init__(self, entries: Iterable[XRefEntry] = ()):
        self._entries: Tuple[XRefEntry, ...] = tuple(entries)
        self._by_idnum: Dict[int, XRefEntry] = {
            entry.idnum: entry for entry in self._entries
        }

    @classmethod
    def empty(cls) -> 'XRefTable':
        return cls()

    @property
    def entries(self) -> Tuple[XRefEntry, ...]:
        return self._entries

    def get(self, idnum: int) -> Optional[XRefEntry]:
        return self._by_idnum.get(idnum)

    def __getitem__(self, idnum: int) -> XRefEntry:
        return self._by_idnum[idnum]

    def __contains__(self, idnum) -> bool:
        return idnum in self._by_idnum

    def __iter__(self) -> Iterator[XRefEntry]:
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __eq__(self, other):
        if not isinstance(other, XRefTable):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self):
        return f'XRefTable({list(self._entries)!r})'


def read_startxref(text: str, tail_size: int = DEFAULT_TAIL_SIZE) -> int:
    """
    Find the value of the ``startxref`` pointer near the end of a file.

    This is internal API.

    :param text:
        The full text of the document.
    :param tail_size:
        Number of trailing characters to search.
    :return:
        The offset of the ``xref`` keyword, as declared in the file.
    :raises MalformedTrailerError:
        if the keyword is not present in the tail, or not followed by
        an integer.
    """
    tail_start = max(len(text) - tail_size, 0)
    keyword_pos = text.find('startxref', tail_start)
    if keyword_pos == -1:
        raise MalformedTrailerError(
            f"startxref not found in the last {tail_size} bytes"
        )
    m = STARTXREF_VALUE.match(text, keyword_pos + 9)
    if m is None:
        raise MalformedTrailerError("startxref is not followed by an offset")
    try:
        startxref = int(m.group(1))
    except ValueError as e:
        # too many digits to convert
        raise MalformedTrailerError("startxref value is out of range") from e
    if startxref > len(text):
        raise MalformedTrailerError(
            f"startxref value {startxref} points past the end of the file"
        )
    logger.debug(f"startxref points to offset {startxref}")
    return startxref


def locate_xref_section(text: str,
                        tail_size: int = DEFAULT_TAIL_SIZE) -> str:
    """
    Slice the cross-reference section out of a document, starting at the
    ``xref`` keyword and running up to the end of the file.

    :param text:
        The full text of the document.
    :param tail_size:
        Number of trailing characters to search for ``startxref``.
    :return:
        The text of the cross-reference section (trailer included).
    :raises MalformedTrailerError:
        if the ``startxref`` pointer cannot be read.
    """
    return text[read_startxref(text, tail_size):]


def _parse_int(field: str, what: str) -> int:
    if DIGITS.fullmatch(field) is None:
        raise MalformedXrefError(f"Invalid {what} in xref table: '{field}'")
    try:
        return int(field)
    except ValueError as e:
        raise MalformedXrefError(
            f"Invalid {what} in xref table: {len(field)} digits"
        ) from e


def _parse_row(fields: List[str], idnum: int) -> XRefEntry:
    offset, generation, marker = fields
    if marker == 'n':
        xref_type = XRefType.STANDARD
    elif marker == 'f':
        xref_type = XRefType.FREE
    else:
        raise MalformedXrefError(
            f"Unknown xref row marker '{marker}' for object {idnum}"
        )
    return XRefEntry(
        idnum=idnum, location=_parse_int(offset, 'offset'),
        generation=_parse_int(generation, 'generation number'),
        xref_type=xref_type
    )


def parse_xref_table(xref_section_text: str) -> XRefTable:
    """
    Parse a cross-reference table.

    :param xref_section_text:
        Text starting with the ``xref`` keyword, e.g. as returned by
        :func:`locate_xref_section`. Everything after the ``trailer``
        keyword is ignored.
    :return:
        An :class:`.XRefTable`.
    :raises MalformedXrefError:
        if the table is not well-formed.
    """

    lines = iter(split_lines(xref_section_text))
    first_line = next(lines).strip(PDF_WHITESPACE)
    if first_line != 'xref':
        raise MalformedXrefError("xref keyword not found")

    entries: List[XRefEntry] = []
    # (start, declared count) of the current subsection
    subsection: Optional[Tuple[int, int]] = None
    row_count = 0

    def _check_row_count():
        if subsection is not None and row_count != subsection[1]:
            start, count = subsection
            raise MalformedXrefError(
                f"Xref subsection starting at {start} declares {count} "
                f"entries, but {row_count} were found"
            )

    for line in lines:
        line = line.strip(PDF_WHITESPACE)
        if line.startswith('trailer'):
            break
        if not line:
            continue
        fields = line.split()
        if len(fields) == 2:
            _check_row_count()
            subsection = (
                _parse_int(fields[0], 'subsection start'),
                _parse_int(fields[1], 'subsection size')
            )
            row_count = 0
        elif len(fields) == 3:
            if subsection is None:
                raise MalformedXrefError(
                    "xref row encountered before subsection header"
                )
            entries.append(_parse_row(fields, subsection[0] + row_count))
            row_count += 1
        else:
            raise MalformedXrefError(f"Unexpected line in xref table: '{line}'")
    else:
        raise MalformedXrefError("trailer keyword not found")

    if subsection is None:
        raise MalformedXrefError("xref table has no subsection header")
    _check_row_count()

    logger.debug(f"Parsed xref table with {len(entries)} entries")
    return XRefTable(entries)
