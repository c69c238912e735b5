"""
Utility functions and exception classes shared by the PDF-level modules.

Generally, all of these constitute internal API, except for the exception
classes.
"""

import re
from typing import Callable, List

__all__ = [
    'PdfError', 'PdfReadError', 'MalformedTrailerError', 'MalformedXrefError',
    'PDF_WHITESPACE', 'LINE_BREAK', 'split_lines', 'get_and_apply',
]


PDF_WHITESPACE = ' \n\r\t\f\x00'
"""
The PDF whitespace characters, as text (the documents we work with are
decoded as latin-1, so every byte maps to exactly one character).
"""

LINE_BREAK = re.compile(r'\r\n|\r|\n')


def split_lines(text: str) -> List[str]:
    """
    Split text into lines, treating ``\\r\\n``, ``\\r`` and ``\\n`` as line
    breaks.
    A trailing line break yields a final empty line.
    """
    return LINE_BREAK.split(text)


class PdfError(Exception):

    def __init__(self, msg: str, *args):
        self.msg = msg
        super().__init__(msg, *args)


class PdfReadError(PdfError):
    pass


class MalformedTrailerError(PdfReadError):
    """
    Raised when the ``startxref`` pointer at the end of a file is missing
    or unreadable.
    """
    pass


class MalformedXrefError(PdfReadError):
    """
    Raised when a cross-reference table cannot be parsed.
    """
    pass


def get_and_apply(dictionary: dict, key, function: Callable, *, default=None):
    try:
        value = dictionary[key]
    except KeyError:
        return default
    return function(value)
