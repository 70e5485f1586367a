"""Frontmatter detection and synthesis."""

import logging
import re
from datetime import date
from typing import Optional

import yaml

from nbpress.models import NotebookCell

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"


class FrontmatterResolver:
    """Decide the metadata header of a rendered document.

    An author may put a YAML block (starting with ``---``) in the first cell
    of a notebook. That block is used verbatim and the cell is not rendered.
    Without one, a default header is generated from the notebook slug.
    """

    def __init__(
        self,
        layout: str = "",
        description: str = "Converted notebook",
        author: str = "Native Notebook",
    ):
        """Initialize the resolver.

        Args:
            layout: Layout written into generated headers (omitted when empty)
            description: Placeholder description for generated headers
            author: Placeholder author for generated headers
        """
        self.layout = layout
        self.description = description
        self.author = author

    def resolve(
        self,
        cells: list[NotebookCell],
        slug: str,
        today: Optional[date] = None,
    ) -> tuple[str, list[NotebookCell]]:
        """Split a notebook's cells into a header and the cells to render.

        Args:
            cells: Cells of the notebook, in order
            slug: Notebook slug, used for the generated title
            today: Publication date for generated headers (defaults to today)

        Returns:
            tuple[str, list[NotebookCell]]: Header text and body cells
        """
        if cells and self.is_frontmatter(cells[0].source):
            header = cells[0].source
            if not header.endswith("\n"):
                header += "\n"
            self.header_fields(header)
            return header, list(cells[1:])

        return self.default_header(slug, today), list(cells)

    def is_frontmatter(self, source: str) -> bool:
        """Return True if a cell source is an author-supplied header."""
        return source.strip().startswith(FRONTMATTER_DELIMITER)

    def default_header(self, slug: str, today: Optional[date] = None) -> str:
        """Build the header used when the notebook supplies none."""
        today = today or date.today()

        fields: dict[str, str] = {}
        if self.layout:
            fields["layout"] = self.layout
        fields["title"] = title_from_slug(slug)
        fields["pubDate"] = today.isoformat()
        fields["description"] = self.description
        fields["author"] = self.author

        body = yaml.safe_dump(
            fields,
            sort_keys=False,
            allow_unicode=True,
            width=float("inf"),
        )
        return f"{FRONTMATTER_DELIMITER}\n{body}{FRONTMATTER_DELIMITER}\n"

    def header_fields(self, header: str) -> dict:
        """Parse the YAML fields of a header block.

        Problems are logged rather than raised: the header is still written
        verbatim and the site generator has the final say.

        Args:
            header: Header text including its delimiters

        Returns:
            dict: Parsed fields (empty if the block does not parse)
        """
        lines = [line.rstrip() for line in header.strip().splitlines()[1:]]
        if FRONTMATTER_DELIMITER in lines:
            lines = lines[: lines.index(FRONTMATTER_DELIMITER)]
        block = "\n".join(lines)

        try:
            fields = yaml.safe_load(block)
        except yaml.YAMLError as e:
            logger.warning("Frontmatter is not valid YAML: %s", e)
            return {}

        if not isinstance(fields, dict):
            logger.warning("Frontmatter does not contain key/value fields")
            return {}

        if "title" not in fields:
            logger.warning("Frontmatter has no title field")

        return fields


def title_from_slug(slug: str) -> str:
    """Turn a file slug into a human readable title.

    Example:
        >>> title_from_slug("intro_to-linear-models")
        'Intro To Linear Models'
    """
    words = [w for w in re.split(r"[-_\s]+", slug) if w]
    if not words:
        return slug
    return " ".join(w[:1].upper() + w[1:] for w in words)
