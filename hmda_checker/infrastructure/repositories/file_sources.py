"""Line sources feeding filings into the parser."""
from __future__ import annotations

import threading
from io import BytesIO
from pathlib import Path
from typing import Iterable, Iterator

from hmda_checker.domain.errors import InputTruncated
from hmda_checker.domain.repositories import FilingSource
from hmda_checker.infrastructure.parsing.utils import compute_file_hash, ensure_bytes


class FileFilingSource(FilingSource):
    """Restartable source over a file path or in-memory bytes."""

    def __init__(self, source: BytesIO | Path | bytes | str) -> None:
        self._path = Path(source) if isinstance(source, (Path, str)) else None
        self._data = None if self._path is not None else ensure_bytes(source)

    def __iter__(self) -> Iterator[bytes]:
        if self._path is not None:
            with self._path.open("rb") as handle:
                yield from handle
        else:
            yield from BytesIO(self._data)

    def digest(self) -> str:
        return compute_file_hash(ensure_bytes(self._path) if self._path is not None else self._data)


class StreamFilingSource(FilingSource):
    """One-shot source over lines arriving from a producer.

    Setting ``cancel`` stops consumption: lines already taken from the producer
    are passed on, and the next request raises ``InputTruncated`` instead of
    reading further.
    """

    def __init__(self, lines: Iterable[str | bytes], cancel: threading.Event | None = None) -> None:
        self._lines = lines
        self._cancel = cancel
        self._consumed = False

    def __iter__(self) -> Iterator[str | bytes]:
        if self._consumed:
            raise RuntimeError("stream sources can only be read once")
        self._consumed = True
        lines = iter(self._lines)
        while True:
            if self._cancel is not None and self._cancel.is_set():
                raise InputTruncated("producer cancelled the upload")
            line = next(lines, None)
            if line is None:
                return
            yield line
