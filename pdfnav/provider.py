"""
Go-to-definition support for indirect references in PDF files.

The :class:`PdfDefinitionProvider` keeps one cross-reference table per open
document. Hosts (an editor integration, the command line interface, ...)
notify the provider when the active document changes or when a document's
text changes, and query it for the definition of the reference under the
cursor.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from pdfnav.document import Position, TextDocument
from pdfnav.pdf_utils.config_utils import ConfigurableMixin, ConfigurationError
from pdfnav.pdf_utils.misc import PdfReadError
from pdfnav.pdf_utils.xref import (
    DEFAULT_TAIL_SIZE,
    XRefTable,
    locate_xref_section,
    parse_xref_table,
)
from pdfnav.resolver import resolve_reference

__all__ = ['NavigatorSettings', 'Location', 'PdfDefinitionProvider']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigatorSettings(ConfigurableMixin):
    """
    Settings for a :class:`.PdfDefinitionProvider`.
    """

    startxref_tail_size: int = DEFAULT_TAIL_SIZE
    """
    Number of characters at the end of a document in which to look for
    the ``startxref`` keyword.
    """

    document_extension: str = 'pdf'
    """
    Only documents whose identifier ends in this extension are parsed.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)
        tail_size = config_dict.get('startxref_tail_size', DEFAULT_TAIL_SIZE)
        if not isinstance(tail_size, int) or isinstance(tail_size, bool) \
                or tail_size <= 0:
            raise ConfigurationError(
                "startxref-tail-size must be a positive integer"
            )
        ext = config_dict.get('document_extension', 'pdf')
        if not isinstance(ext, str) or not ext:
            raise ConfigurationError(
                "document-extension must be a nonempty string"
            )
        config_dict['document_extension'] = ext.lstrip('.')


@dataclass(frozen=True)
class Location:
    """
    Jump target for a resolved reference.
    """

    document_id: str
    position: Position


class PdfDefinitionProvider:
    """
    Resolve indirect references in the documents it has been told about.

    A document is *unparsed* until the provider has processed it, and
    *parsed* afterwards. Documents that failed to parse are recorded with an
    empty table, so references in them never resolve until they are
    parsed again.

    Tables are only discarded through :meth:`invalidate` or
    :meth:`close_document`, so hosts should call the latter whenever a
    document is closed.

    :param settings:
        Navigator settings. Defaults are used if not specified.
    """

    def __init__(self, settings: Optional[NavigatorSettings] = None):
        self.settings = settings or NavigatorSettings()
        self._tables: Dict[str, XRefTable] = {}

    def accepts(self, document: TextDocument) -> bool:
        ext = '.' + self.settings.document_extension.lower()
        return document.document_id.lower().endswith(ext)

    def parse_document(self, document: TextDocument) -> XRefTable:
        """
        (Re)parse the cross-reference table of a document, replacing any
        table previously recorded for it.

        Parse errors are logged, not raised.

        :param document:
            The document to parse.
        :return:
            The new table, which is empty if parsing failed.
        """
        try:
            xref_section = locate_xref_section(
                document.text, self.settings.startxref_tail_size
            )
            table = parse_xref_table(xref_section)
        except PdfReadError as e:
            logger.warning(
                f"Failed to read cross-reference table of "
                f"{document.document_id}: {e.msg}"
            )
            table = XRefTable.empty()
        else:
            logger.debug(
                f"Read {len(table)} xref entries from {document.document_id}"
            )
        self._tables[document.document_id] = table
        return table

    def on_active_document_changed(self, document: Optional[TextDocument]):
        if document is None or not self.accepts(document):
            return
        self.parse_document(document)

    def on_document_changed(self, document: TextDocument):
        """
        Notify the provider that the text of a document has changed.
        """
        if self.accepts(document):
            self.parse_document(document)

    def invalidate(self, document_id: str):
        """
        Forget the table of a document. No references in it will resolve
        until it is parsed again.
        """
        self._tables.pop(document_id, None)

    def close_document(self, document_id: str):
        self.invalidate(document_id)

    def table_for(self, document_id: str) -> Optional[XRefTable]:
        return self._tables.get(document_id)

    def provide_definition(self, document: TextDocument,
                           position: Position) -> Optional[Location]:
        """
        Find the definition of the reference at the given position.

        :param document:
            The document containing the reference.
        :param position:
            The cursor position.
        :return:
            A :class:`.Location`, or ``None`` if no definition is available.
        """
        table = self._tables.get(document.document_id)
        if table is None:
            logger.debug(f"{document.document_id} has not been parsed")
            return None
        try:
            line_text = document.line_text(position.line)
        except IndexError:
            return None
        target = resolve_reference(
            document, table, line_text, position.column
        )
        if target is None:
            return None
        return Location(document.document_id, target)
