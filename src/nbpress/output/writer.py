"""Output writing for rendered documents and their assets."""

import logging
import os
import tempfile
from pathlib import Path

from nbpress import AssetWriteError
from nbpress.models import AssetFile

logger = logging.getLogger(__name__)


def atomic_write(path: Path | str, content: bytes) -> None:
    """Write a file so readers see either the old or the new content.

    The parent directory is created when missing.

    Args:
        path: Destination file
        content: Full new content
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class OutputWriter:
    """Write one notebook's document and assets as a unit.

    Layout:
        {output_dir}/{slug}{ext}          # rendered document
        {assets_dir}/{slug}/{hash}.{ext}  # extracted assets
    """

    def __init__(
        self,
        output_dir: Path | str,
        assets_dir: Path | str,
        document_extension: str = ".mdx",
    ):
        """Initialize output writer.

        Args:
            output_dir: Directory for rendered documents
            assets_dir: Root directory for asset subdirectories
            document_extension: Extension of rendered documents
        """
        self.output_dir = Path(output_dir)
        self.assets_dir = Path(assets_dir)
        self.document_extension = document_extension

    def document_path(self, slug: str) -> Path:
        """Get the rendered document path for a slug."""
        return self.output_dir / f"{slug}{self.document_extension}"

    def asset_dir(self, slug: str) -> Path:
        """Get the asset directory for a slug."""
        return self.assets_dir / slug

    def commit(
        self,
        slug: str,
        document: str,
        assets: list[AssetFile],
        prune: bool = False,
    ) -> Path:
        """Write assets, then the document.

        If any write fails, assets created by this call are removed and the
        previous document is left in place.

        Args:
            slug: Notebook slug
            document: Full document text
            assets: Assets referenced by the document
            prune: Remove other files from the slug's asset directory

        Returns:
            Path: Path to the written document

        Raises:
            AssetWriteError: If writing fails
        """
        created: list[Path] = []
        document_path = self.document_path(slug)

        try:
            for asset in assets:
                path = self.assets_dir / asset.relative_path
                existed = path.exists()
                if existed and path.read_bytes() == asset.content:
                    continue
                atomic_write(path, asset.content)
                if not existed:
                    created.append(path)

            atomic_write(document_path, document.encode("utf-8"))

        except OSError as e:
            for path in created:
                try:
                    path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.warning("Failed to remove %s: %s", path, cleanup_error)
            raise AssetWriteError(f"Failed to write output for {slug}: {e}") from e

        if prune:
            self.prune(slug, {asset.filename for asset in assets})

        return document_path

    def prune(self, slug: str, keep: set[str]) -> list[Path]:
        """Delete files in a slug's asset directory that are not in ``keep``.

        Args:
            slug: Notebook slug
            keep: File names still referenced

        Returns:
            list[Path]: Removed files
        """
        directory = self.asset_dir(slug)
        if not directory.is_dir():
            return []

        removed = []
        for path in sorted(directory.iterdir()):
            if path.is_file() and path.name not in keep:
                try:
                    path.unlink()
                except OSError as e:
                    logger.warning("Failed to remove stale asset %s: %s", path, e)
                    continue
                removed.append(path)
                logger.debug("Removed stale asset %s", path)
        return removed
