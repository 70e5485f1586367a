"""Content fingerprints for change detection and asset naming."""

import hashlib


class ContentHasher:
    """Compute stable md5 fingerprints.

    Fingerprints are used for change detection only, never for security.
    """

    def fingerprint(self, data: bytes | str) -> str:
        """Return the hex digest of the given content.

        Args:
            data: Raw bytes, or text which is encoded as UTF-8

        Returns:
            str: 32-character hex digest
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        return hashlib.md5(data).hexdigest()

    def short(self, data: bytes | str, length: int = 8) -> str:
        """Return a truncated fingerprint suitable for file names."""
        if length < 1:
            raise ValueError("Fingerprint length must be >= 1")
        return self.fingerprint(data)[:length]
