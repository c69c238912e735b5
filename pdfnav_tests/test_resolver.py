import sys

import pytest

from pdfnav.document import Position, TextDocument
from pdfnav.pdf_utils.xref import (
    XRefEntry,
    XRefTable,
    locate_xref_section,
    parse_xref_table,
)
from pdfnav.resolver import (
    ReferenceToken,
    extract_reference_token,
    resolve_reference,
)
from pdfnav_tests.samples import (
    MINIMAL,
    MINIMAL_CRLF,
    MINIMAL_CRLF_OFFSETS,
    MINIMAL_OFFSETS,
    SCENARIO_XREF,
)


@pytest.mark.parametrize('line,column,expected', [
    ('Root 2 0 R', 5, ReferenceToken(2, 0)),
    ('Root 2 0 R', 7, ReferenceToken(2, 0)),
    ('Root 2 0 R', 9, ReferenceToken(2, 0)),
    ('/Kids [3 0 R 12 0 R]', 7, ReferenceToken(3, 0)),
    ('/Kids [3 0 R 12 0 R]', 12, ReferenceToken(12, 0)),
    ('/Kids [3 0 R 12 0 R]', 14, ReferenceToken(12, 0)),
    ('/Kids [3 0 R 112 5 R]', 14, ReferenceToken(112, 5)),
    # before the reference, with nothing but lowercase in between
    ('/Parent 2 0 R', 0, ReferenceToken(2, 0)),
])
def test_extract_reference(line, column, expected):
    assert extract_reference_token(line, column) == expected


@pytest.mark.parametrize('line,column', [
    # no R after the cursor
    ('<< /Type /Page >>', 0),
    ('', 0),
    # strictly after the R
    ('Root 2 0 R', 10),
    ('Root 2 0 R >>', 11),
    # the first R after the cursor does not end a reference
    ('/Root 2 0 R', 0),
    ('2 0  R', 0),
    ('2 0 obj R', 0),
    ('/Kids [3 0 R]', -1),
])
def test_extract_reference_fails(line, column):
    assert extract_reference_token(line, column) is None


def test_resolve_scenario():
    lines = [
        '%PDF-1.4',
        '1 0 obj',
        '<< /Type /Catalog',
        '/Pages 3 0 R',
        '>>',
        'Root 2 0 R',
        'endobj',
    ]
    document = TextDocument('scenario.pdf', '\n'.join(lines))
    table = parse_xref_table(SCENARIO_XREF)
    result = resolve_reference(document, table, document.line_text(5), 5)
    assert result == document.position_at(25)
    assert result == Position(2, 8)


@pytest.mark.parametrize('text,offsets', [
    (MINIMAL, MINIMAL_OFFSETS), (MINIMAL_CRLF, MINIMAL_CRLF_OFFSETS)
])
def test_resolve_roundtrip(text, offsets):
    document = TextDocument('minimal.pdf', text)
    table = parse_xref_table(locate_xref_section(text))

    def _resolve(line_no, token):
        line = document.line_text(line_no)
        return resolve_reference(document, table, line, line.index(token))

    # Pages entry in the catalog
    assert _resolve(2, '2 0 R') == document.position_at(offsets[2])
    assert _resolve(2, '2 0 R') == Position(4, 0)
    # Kids array
    assert _resolve(5, '3 0 R') == Position(7, 0)
    # Root entry in the trailer
    trailer_line = document.line_count - 5
    assert document.line_text(trailer_line).startswith('<< /Size')
    assert _resolve(trailer_line, '1 0 R') == Position(1, 0)


def test_resolve_generation_ignored():
    document = TextDocument('minimal.pdf', MINIMAL)
    table = parse_xref_table(locate_xref_section(MINIMAL))
    assert resolve_reference(document, table, '7 2 0 R', 2) == Position(4, 0)
    assert resolve_reference(document, table, '2 9 R', 0) == Position(4, 0)


def test_resolve_out_of_range():
    document = TextDocument('minimal.pdf', MINIMAL)
    table = parse_xref_table(locate_xref_section(MINIMAL))
    assert resolve_reference(document, table, '/Foo 4 0 R', 5) is None
    assert resolve_reference(document, table, '/Foo 1000 0 R', 5) is None


def test_resolve_free_entry():
    document = TextDocument('minimal.pdf', MINIMAL)
    table = parse_xref_table(locate_xref_section(MINIMAL))
    assert resolve_reference(document, table, '0 65535 R', 0) is None


def test_resolve_offset_past_end():
    document = TextDocument('short.pdf', 'Root 1 0 R')
    table = XRefTable([XRefEntry(idnum=1, location=1000)])
    assert resolve_reference(document, table, 'Root 1 0 R', 5) is None


def test_resolve_empty_table():
    document = TextDocument('minimal.pdf', MINIMAL)
    line = document.line_text(2)
    column = line.index('2 0 R')
    assert resolve_reference(document, XRefTable.empty(), line, column) is None


def test_resolve_deterministic():
    document = TextDocument('minimal.pdf', MINIMAL)
    table = parse_xref_table(locate_xref_section(MINIMAL))
    results = {
        resolve_reference(document, table, '/Kids [3 0 R]', 7)
        for _ in range(3)
    }
    assert results == {Position(7, 0)}


@pytest.mark.skipif(
    not hasattr(sys, 'get_int_max_str_digits'),
    reason='int() has no digit limit on this Python version'
)
@pytest.mark.parametrize('line', [
    '1' * 5000 + ' 0 R',
    '/Pages 2 ' + '1' * 5000 + ' R',
])
def test_extract_reference_number_too_long(line):
    assert extract_reference_token(line, 0) is None
