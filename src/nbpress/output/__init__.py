"""Writing rendered documents and assets to disk."""

from nbpress.output.writer import OutputWriter, atomic_write

__all__ = ["OutputWriter", "atomic_write"]
