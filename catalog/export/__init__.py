"""Book query evaluation and XML export."""

from catalog.export.assembler import assemble
from catalog.export.matching import filter_books, matches
from catalog.export.xml_exporter import ExportDocument, parse_export, render

__all__ = [
    "ExportDocument",
    "assemble",
    "filter_books",
    "matches",
    "parse_export",
    "render",
]
