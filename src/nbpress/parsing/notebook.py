"""Jupyter notebook parsing functionality."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import nbformat

from nbpress import NotebookParseError
from nbpress.models import NotebookCell, ParsedNotebook
from nbpress.parsing.source import normalize_source

logger = logging.getLogger(__name__)


class NotebookParser:
    """Parser for Jupyter notebooks.

    Reads .ipynb JSON leniently: schema validation is not enforced, unknown
    cell types are kept as ``other`` and every text field is normalized to a
    single string here, so later stages never see line-fragment lists.
    """

    def __init__(self, default_language: str = "python"):
        """Initialize the parser.

        Args:
            default_language: Language used when the notebook declares none
        """
        self.default_language = default_language

    def parse(self, filepath: Path | str) -> ParsedNotebook:
        """Parse a Jupyter notebook file.

        Args:
            filepath: Path to the .ipynb file

        Returns:
            ParsedNotebook: Parsed notebook structure

        Raises:
            NotebookParseError: If parsing fails
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise NotebookParseError(f"Notebook file not found: {filepath}")

        if not filepath.suffix == ".ipynb":
            raise NotebookParseError(f"File is not a Jupyter notebook: {filepath}")

        try:
            data = filepath.read_bytes()
        except OSError as e:
            raise NotebookParseError(f"Failed to read notebook {filepath}: {e}") from e

        return self.parse_bytes(data, filepath)

    def parse_bytes(self, data: bytes, filepath: Path | str) -> ParsedNotebook:
        """Parse notebook content that has already been read.

        Args:
            data: Raw file content
            filepath: Path the content came from

        Returns:
            ParsedNotebook: Parsed notebook structure

        Raises:
            NotebookParseError: If the content is not a notebook
        """
        filepath = Path(filepath)

        try:
            raw = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise NotebookParseError(f"Notebook {filepath} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise NotebookParseError(f"Notebook {filepath} is not a JSON object")

        nb = self._upgrade(nbformat.from_dict(raw), filepath)

        cells = nb.get("cells")
        if not isinstance(cells, list):
            raise NotebookParseError(f"Notebook {filepath} has no cell list")

        parsed_cells = []
        for index, cell in enumerate(cells):
            if not isinstance(cell, dict):
                logger.warning("Skipping malformed cell %d in %s", index, filepath.name)
                continue
            parsed_cells.append(self._extract_cell_content(cell, index))

        metadata = nb.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}

        return ParsedNotebook(
            filepath=filepath,
            cells=parsed_cells,
            metadata=metadata,
            language=self._detect_language(metadata),
        )

    def _upgrade(self, nb: Any, filepath: Path) -> Any:
        """Convert notebooks written in nbformat < 4 to the v4 layout."""
        version = nb.get("nbformat")
        if not isinstance(version, int) or version >= 4:
            return nb

        try:
            return nbformat.convert(nb, 4)
        except Exception as e:
            raise NotebookParseError(
                f"Failed to upgrade notebook {filepath} from nbformat {version}: {e}"
            ) from e

    def _extract_cell_content(self, cell: dict, index: int) -> NotebookCell:
        """Extract content from a single notebook cell.

        Args:
            cell: Raw cell mapping
            index: Position of the cell in the notebook

        Returns:
            NotebookCell: Parsed cell data
        """
        raw_type = str(cell.get("cell_type", ""))
        source = normalize_source(cell.get("source"))

        if raw_type == "markdown":
            return NotebookCell(
                cell_type="markdown",
                source=source,
                index=index,
                raw_type=raw_type,
            )

        elif raw_type == "code":
            outputs = []
            for output in cell.get("outputs") or []:
                if isinstance(output, dict):
                    outputs.append(self._serialize_output(output))

            return NotebookCell(
                cell_type="code",
                source=source,
                outputs=outputs,
                index=index,
                raw_type=raw_type,
            )

        # Raw and unknown cell types are kept only for frontmatter detection
        else:
            return NotebookCell(
                cell_type="other",
                source=source,
                index=index,
                raw_type=raw_type,
            )

    def _serialize_output(self, output: dict) -> dict:
        """Copy an output into plain dicts with normalized text payloads.

        JSON payloads (mappings, e.g. plotly figures) are kept as they are;
        string and line-list payloads are joined.

        Args:
            output: Raw output mapping

        Returns:
            dict: Serialized output data
        """
        output_dict: dict[str, Any] = {}

        for key, value in output.items():
            if key == "text":
                output_dict["text"] = normalize_source(value)
            elif key == "data" and isinstance(value, dict):
                output_dict["data"] = {
                    mime: self._normalize_payload(payload) for mime, payload in value.items()
                }
            else:
                output_dict[key] = _plain(value)

        return output_dict

    def _normalize_payload(self, payload: Any) -> Any:
        if isinstance(payload, dict):
            return _plain(payload)
        return normalize_source(payload)

    def _detect_language(self, metadata: dict) -> str:
        """Pick the code fence language from notebook metadata."""
        kernelspec = metadata.get("kernelspec")
        language_info = metadata.get("language_info")
        candidates: list[Optional[Any]] = [
            kernelspec.get("language") if isinstance(kernelspec, dict) else None,
            language_info.get("name") if isinstance(language_info, dict) else None,
        ]
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip().lower()
        return self.default_language


def _plain(value: Any) -> Any:
    """Recursively convert NotebookNode values into plain containers."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
