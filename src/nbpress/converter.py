"""Conversion of a single notebook into a document and its assets."""

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from nbpress import NotebookParseError
from nbpress.assembler import DocumentAssembler
from nbpress.cache import CacheStore
from nbpress.config import NbPressConfig
from nbpress.hashing import ContentHasher
from nbpress.models import AssetFile, ConversionResult, ConversionStatus
from nbpress.output import OutputWriter
from nbpress.parsing import FrontmatterResolver, NotebookParser
from nbpress.rendering import OutputRenderer

logger = logging.getLogger(__name__)

NOTEBOOK_SUFFIX = ".ipynb"


class NotebookConverter:
    """Convert one notebook, unless its content is already cached.

    Nothing is written until the whole notebook has been rendered in memory,
    and the fingerprint is recorded only after every file was written, so a
    failed conversion is retried on the next run.
    """

    def __init__(
        self,
        notebooks_dir: Path | str,
        cache: CacheStore,
        writer: OutputWriter,
        parser: Optional[NotebookParser] = None,
        resolver: Optional[FrontmatterResolver] = None,
        assembler: Optional[DocumentAssembler] = None,
        hasher: Optional[ContentHasher] = None,
        prune_stale_assets: bool = False,
        today: Optional[Callable[[], date]] = None,
    ):
        """Initialize the converter.

        Args:
            notebooks_dir: Directory holding the notebooks
            cache: Loaded fingerprint cache
            writer: Writer for documents and assets
            parser: Notebook parser
            resolver: Frontmatter resolver
            assembler: Document assembler
            hasher: Fingerprint hasher
            prune_stale_assets: Remove assets no longer referenced
            today: Date provider for generated headers
        """
        self.notebooks_dir = Path(notebooks_dir)
        self.cache = cache
        self.writer = writer
        self.parser = parser or NotebookParser()
        self.resolver = resolver or FrontmatterResolver()
        self.hasher = hasher or ContentHasher()
        self.assembler = assembler or DocumentAssembler(OutputRenderer(hasher=self.hasher))
        self.prune_stale_assets = prune_stale_assets
        self.today = today or date.today

    @classmethod
    def from_config(cls, config: NbPressConfig, cache: CacheStore) -> "NotebookConverter":
        """Build a converter wired from configuration."""
        hasher = ContentHasher()
        renderer = OutputRenderer(
            assets_url_root=config.assets_url_root,
            frame_height=config.frame_height,
            plotly_cdn_url=config.plotly_cdn_url,
            hasher=hasher,
        )
        return cls(
            notebooks_dir=config.notebooks_dir,
            cache=cache,
            writer=OutputWriter(
                output_dir=config.output_dir,
                assets_dir=config.assets_dir,
                document_extension=config.document_extension,
            ),
            parser=NotebookParser(default_language=config.default_language),
            resolver=FrontmatterResolver(
                layout=config.frontmatter_layout,
                description=config.default_description,
                author=config.default_author,
            ),
            assembler=DocumentAssembler(renderer),
            hasher=hasher,
            prune_stale_assets=config.prune_stale_assets,
        )

    def convert(self, filename: str, force: bool = False) -> ConversionResult:
        """Convert one notebook from the notebooks directory.

        Args:
            filename: Notebook file name (not a path)
            force: Convert even if the cache says the content is unchanged

        Returns:
            ConversionResult: What happened to the file

        Raises:
            NotebookParseError: If the notebook cannot be read or parsed
            AssetWriteError: If the output cannot be written
        """
        slug = slug_for(filename)
        path = self.notebooks_dir / filename

        if not filename.endswith(NOTEBOOK_SUFFIX) or not path.is_file():
            return ConversionResult(filename=filename, slug=slug, status=ConversionStatus.IGNORED)

        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return ConversionResult(filename=filename, slug=slug, status=ConversionStatus.IGNORED)
        except OSError as e:
            raise NotebookParseError(f"Failed to read notebook {path}: {e}") from e

        fingerprint = self.hasher.fingerprint(raw)

        if not force and self.cache.should_skip(filename, fingerprint):
            logger.debug("Unchanged, skipping: %s", filename)
            return ConversionResult(filename=filename, slug=slug, status=ConversionStatus.SKIPPED)

        logger.info("Processing: %s", filename)

        document, assets = self.render(raw, path)
        document_path = self.writer.commit(
            slug, document, assets, prune=self.prune_stale_assets
        )

        self.cache.record(filename, fingerprint)
        self.cache.flush()

        logger.info("Converted %s -> %s", filename, document_path.name)
        return ConversionResult(
            filename=filename,
            slug=slug,
            status=ConversionStatus.CONVERTED,
            document_path=document_path,
            assets=[asset.filename for asset in assets],
        )

    def render(self, raw: bytes, path: Path) -> tuple[str, list[AssetFile]]:
        """Render notebook content in memory.

        Args:
            raw: Notebook file content
            path: Notebook path (its stem is the slug)

        Returns:
            tuple[str, list[AssetFile]]: Document text and the assets it references
        """
        notebook = self.parser.parse_bytes(raw, path)
        header, cells = self.resolver.resolve(notebook.cells, notebook.slug, self.today())
        assembled = self.assembler.assemble(cells, notebook.slug, notebook.language)
        return header + "\n" + assembled.body, assembled.assets


def slug_for(filename: str) -> str:
    """Return the slug for a notebook file name."""
    if filename.endswith(NOTEBOOK_SUFFIX):
        return filename[: -len(NOTEBOOK_SUFFIX)]
    return Path(filename).stem
