"""Data models for notebook parsing and representation."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NotebookCell(BaseModel):
    """Represents a single notebook cell.

    Attributes:
        cell_type: Type of cell (markdown, code, or other)
        source: Cell content as a single string
        outputs: List of cell outputs (for code cells)
        index: Position of the cell in the source notebook
        raw_type: Cell type as written in the notebook
    """

    cell_type: Literal["markdown", "code", "other"]
    source: str = ""
    outputs: list[dict] = Field(default_factory=list)
    index: int = 0
    raw_type: str = ""

    model_config = ConfigDict(frozen=True)


class ParsedNotebook(BaseModel):
    """Complete parsed notebook structure.

    Attributes:
        filepath: Path to the source notebook file
        cells: List of parsed notebook cells
        metadata: Notebook metadata dictionary
        language: Language used to label code fences
    """

    filepath: Path
    cells: list[NotebookCell] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)
    language: str = "python"

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def slug(self) -> str:
        """Identifier used for the output document and asset directory."""
        return self.filepath.stem
