"""Data models for nbpress."""

from nbpress.models.notebook import NotebookCell, ParsedNotebook
from nbpress.models.render import (
    AssembledDocument,
    AssetFile,
    ConversionResult,
    ConversionStatus,
    OutputKind,
    RenderContext,
    RenderedOutput,
)

__all__ = [
    "NotebookCell",
    "ParsedNotebook",
    "AssetFile",
    "AssembledDocument",
    "ConversionResult",
    "ConversionStatus",
    "OutputKind",
    "RenderContext",
    "RenderedOutput",
]
