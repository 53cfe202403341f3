"""
Default data provider: reads data files from disk for algorithms.

Keys ending in a compressed suffix (".gz") are decompressed transparently.
Every fetch, successful or not, notifies subscribers exactly once.

Copyright (c) 2025 Graziano Labs Corp.
"""

import gzip
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIXES = (".gz",)


@dataclass(frozen=True)
class DataRequestEvent:
    """Outcome of one fetch"""
    key: str
    succeeded: bool
    error_message: str = ""


DataRequestHandler = Callable[[DataRequestEvent], None]


class DefaultDataProvider:
    """
    Fetch data files by key.

    Example:
        provider = DefaultDataProvider("data")
        provider.subscribe(lambda e: print(e.key, e.succeeded))
        stream = provider.fetch("equity/usa/daily/spy.csv.gz")
        if stream is not None:
            with stream:
                rows = stream.read().decode().splitlines()
    """

    def __init__(self, data_folder: Optional[str] = None):
        """
        Args:
            data_folder: Base directory for relative keys. If None, keys are
                resolved against the working directory.
        """
        self.data_folder = Path(data_folder) if data_folder else None
        self._handlers: List[DataRequestHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: DataRequestHandler) -> None:
        """Register a handler called after every fetch."""
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: DataRequestHandler) -> None:
        """Remove a previously registered handler."""
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

    def resolve(self, key: str) -> Path:
        """Normalize ``key`` to a filesystem path."""
        path = Path(key.replace("\\", "/")).expanduser()
        if self.data_folder is not None and not path.is_absolute():
            path = self.data_folder / path
        return path

    def fetch(self, key: str) -> Optional[BinaryIO]:
        """
        Open the data stored under ``key``.

        Args:
            key: File path, absolute or relative to data_folder

        Returns:
            Readable binary stream (decompressed for ".gz" keys), or None
            when nothing exists at ``key``

        Raises:
            OSError: For I/O failures other than a missing path
        """
        succeeded = True
        error_message = ""
        path = self.resolve(key)

        try:
            if not path.is_file():
                succeeded = False
                error_message = f"File not found: {path}"
                return None
            if path.name.endswith(COMPRESSED_SUFFIXES):
                return gzip.open(path, "rb")
            return open(path, "rb")
        except (FileNotFoundError, NotADirectoryError) as e:
            succeeded = False
            error_message = str(e)
            return None
        except OSError as e:
            succeeded = False
            error_message = str(e)
            logger.error("Failed to fetch %s: %s", key, e)
            raise
        finally:
            self._notify(DataRequestEvent(key, succeeded, error_message))

    def _notify(self, event: DataRequestEvent) -> None:
        with self._lock:
            handlers = self._handlers[:]
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Error in data request handler for '%s'", event.key)

    def close(self) -> None:
        """Nothing to release; present for symmetry with other providers."""

    def __enter__(self) -> "DefaultDataProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
