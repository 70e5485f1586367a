"""Data models for rendered outputs, assets and conversion results."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OutputKind(str, Enum):
    """Recognized output payload kinds, in rendering priority order."""

    PLOTLY = "plotly"
    HTML = "html"
    RASTER_IMAGE = "raster_image"
    SVG = "svg"
    TEXT_PLAIN = "text_plain"
    STREAM = "stream"
    UNRECOGNIZED = "unrecognized"


class RenderContext(BaseModel):
    """Position of an output, used to name its asset.

    Attributes:
        slug: Slug of the notebook being rendered
        cell_index: Index of the cell in the source notebook
        output_index: Index of the output within the cell
    """

    slug: str
    cell_index: int
    output_index: int

    model_config = ConfigDict(frozen=True)


class AssetFile(BaseModel):
    """A side file extracted from a cell output.

    Attributes:
        slug: Slug of the owning notebook
        filename: File name inside the slug's asset directory
        content: Raw file content
        url: Site path the document uses to reference the asset
    """

    slug: str
    filename: str
    content: bytes
    url: str

    @property
    def relative_path(self) -> Path:
        """Path relative to the assets root directory."""
        return Path(self.slug) / self.filename


class RenderedOutput(BaseModel):
    """Result of rendering one cell output.

    Attributes:
        kind: Payload kind that was rendered
        markup: Fragment inserted into the document
        assets: Files the fragment references
    """

    kind: OutputKind
    markup: str
    assets: list[AssetFile] = Field(default_factory=list)


class AssembledDocument(BaseModel):
    """Rendered document body plus the assets it references."""

    body: str
    assets: list[AssetFile] = Field(default_factory=list)


class ConversionStatus(str, Enum):
    """Outcome of converting one notebook."""

    CONVERTED = "converted"
    SKIPPED = "skipped"
    FAILED = "failed"
    IGNORED = "ignored"


class ConversionResult(BaseModel):
    """Outcome of a single notebook conversion.

    Attributes:
        filename: Notebook file name
        slug: Slug derived from the filename
        status: What happened to the file
        document_path: Rendered document path (when converted)
        assets: Names of the asset files the document references
        error: Error message (when failed)
    """

    filename: str
    slug: str
    status: ConversionStatus
    document_path: Optional[Path] = None
    assets: list[str] = Field(default_factory=list)
    error: Optional[str] = None
