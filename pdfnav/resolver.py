"""
Resolve indirect references (``12 0 R``) to the position of the definition
of the object they point to.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from pdfnav.document import Position, TextDocument
from pdfnav.pdf_utils.xref import XRefTable, XRefType

__all__ = ['ReferenceToken', 'extract_reference_token', 'resolve_reference']

logger = logging.getLogger(__name__)

# anchored at the end, so only the reference ending at the R closest
# to the cursor matches
REFERENCE_PATTERN = re.compile(r'([0-9]+) ([0-9]+) R$')


@dataclass(frozen=True)
class ReferenceToken:
    """
    An indirect reference extracted from the text of a document.
    """

    idnum: int
    generation: int


def extract_reference_token(line_text: str,
                            column: int) -> Optional[ReferenceToken]:
    """
    Extract the indirect reference the cursor is on (or in front of).

    The first ``R`` at or after ``column`` is taken to be the end of the
    reference; the text before it must then end in ``<idnum> <generation>``.

    :param line_text:
        The text of the line containing the cursor.
    :param column:
        The zero-based column of the cursor.
    :return:
        A :class:`.ReferenceToken`, or ``None`` if there is no reference
        at the cursor.
    """
    if column < 0:
        return None
    r_pos = line_text.find('R', column)
    if r_pos == -1:
        return None
    m = REFERENCE_PATTERN.search(line_text[:r_pos + 1])
    if m is None:
        return None
    try:
        return ReferenceToken(
            idnum=int(m.group(1)), generation=int(m.group(2))
        )
    except ValueError:
        # too many digits to convert, can't be in any xref table
        return None


def resolve_reference(document: TextDocument, table: XRefTable,
                      line_text: str, column: int) -> Optional[Position]:
    """
    Resolve the reference at the cursor to the position of the referenced
    object's definition.

    The generation number of the reference is not taken into account when
    looking up the object in the cross-reference table.

    :param document:
        The document in which the reference occurs.
    :param table:
        The cross-reference table of that document.
    :param line_text:
        The text of the line containing the cursor.
    :param column:
        The zero-based column of the cursor.
    :return:
        The position of the object definition, or ``None`` if it cannot be
        determined.
    """
    token = extract_reference_token(line_text, column)
    if token is None:
        return None
    entry = table.get(token.idnum)
    if entry is None:
        logger.debug(f"Object {token.idnum} is not in the xref table")
        return None
    # a free row holds a free-list link instead of an offset, so unlike
    # the generation number, the row type is not ignored
    if entry.xref_type == XRefType.FREE:
        logger.debug(f"Object {token.idnum} is marked free in the xref table")
        return None
    if entry.location > len(document.text):
        logger.debug(
            f"Offset {entry.location} of object {token.idnum} is past the "
            f"end of {document.document_id}"
        )
        return None
    return document.position_at(entry.location)
