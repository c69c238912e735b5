from typing import Dict, List, Tuple

SCENARIO_XREF = (
    'xref\n'
    '0 3\n'
    '0000000000 65535 f \n'
    '0000000010 00000 n \n'
    '0000000025 00000 n \n'
    'trailer\n'
    '<< /Size 3 >>\n'
)

MINIMAL_OBJECTS = [
    '<< /Type /Catalog /Pages 2 0 R >>',
    '<< /Type /Pages /Kids [3 0 R] /Count 1 >>',
    '<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>',
]


def xref_row(offset: int, generation: int, marker: str, eol='\n') -> str:
    # rows are 20 bytes long, the EOL marker takes up two of them
    if eol == '\n':
        eol = ' \n'
    return f'{offset:010d} {generation:05d} {marker}{eol}'


def build_pdf(objects: List[str], eol='\n',
              header='%PDF-1.4') -> Tuple[str, Dict[int, int]]:
    """
    Build the text of a PDF file with the given objects (numbered from 1)
    and a valid cross-reference table.

    :return:
        The text of the file, and the offsets of the objects.
    """
    parts = [f'{header}{eol}']
    offsets = {}
    pos = len(parts[0])
    for idnum, obj in enumerate(objects, start=1):
        offsets[idnum] = pos
        obj_text = f'{idnum} 0 obj{eol}{obj}{eol}endobj{eol}'
        parts.append(obj_text)
        pos += len(obj_text)
    xref_offset = pos
    parts.append(f'xref{eol}0 {len(objects) + 1}{eol}')
    parts.append(xref_row(0, 65535, 'f', eol))
    for idnum in range(1, len(objects) + 1):
        parts.append(xref_row(offsets[idnum], 0, 'n', eol))
    parts.append(
        f'trailer{eol}<< /Size {len(objects) + 1} /Root 1 0 R >>{eol}'
        f'startxref{eol}{xref_offset}{eol}%%EOF{eol}'
    )
    return ''.join(parts), offsets


MINIMAL, MINIMAL_OFFSETS = build_pdf(MINIMAL_OBJECTS)
MINIMAL_CRLF, MINIMAL_CRLF_OFFSETS = build_pdf(MINIMAL_OBJECTS, eol='\r\n')
