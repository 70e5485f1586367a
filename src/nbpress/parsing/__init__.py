"""Notebook ingestion: parsing, source normalization and frontmatter."""

from nbpress.parsing.frontmatter import FrontmatterResolver
from nbpress.parsing.notebook import NotebookParser
from nbpress.parsing.source import normalize_source

__all__ = ["FrontmatterResolver", "NotebookParser", "normalize_source"]
