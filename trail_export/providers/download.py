"""Download targets: where produced artifacts are handed over."""

from __future__ import annotations

import abc
import logging
from pathlib import Path

from trail_export.core.exceptions import DownloadFailedError

logger = logging.getLogger("trail_export.providers.download")


class DownloadTarget(abc.ABC):
    """Receives the bytes of an exported file."""

    @abc.abstractmethod
    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        """Save ``content`` under ``filename``.

        Returns:
            Where the file ended up (path or URL).

        Raises:
            DownloadFailedError: If the file could not be saved.
        """


class DirectoryDownloadTarget(DownloadTarget):
    """Writes downloads into a local directory (created on demand)."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        if Path(filename).name != filename:
            msg = f"Download filename must not contain a path: {filename!r}"
            raise DownloadFailedError(msg)

        path = self._directory / filename
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            msg = f"Cannot write {filename} to {self._directory}: {exc}"
            raise DownloadFailedError(msg) from exc

        logger.info(
            "Download saved | file=%s | mime=%s | bytes=%d",
            path,
            mime_type,
            len(content),
        )
        return str(path)
