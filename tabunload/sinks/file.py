"""Rotating delimited-file sink.

Writes rows as delimited text, starting a new numbered file whenever the
current one approaches the size threshold, and optionally gzips each file
once it is closed.
"""

from __future__ import annotations

import gzip
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from tabunload.core.sink import Sink
from tabunload.exceptions import SinkError
from tabunload.models.params import UnloadParams
from tabunload.models.results import SinkResult

logger = logging.getLogger(__name__)


def output_path(base_name: str, extension: str, sequence: int, worker_id: Optional[int] = None) -> Path:
    """Deterministic output path for one file of the sequence.

    Examples:
        >>> output_path("out/orders", "tsv", 1)
        PosixPath('out/orders_0000001.tsv')
        >>> output_path("out/orders", "csv", 12, worker_id=3)
        PosixPath('out/orders_3_0000012.csv')
    """
    if worker_id is None:
        return Path(f"{base_name}_{sequence:07d}.{extension}")
    return Path(f"{base_name}_{worker_id}_{sequence:07d}.{extension}")


def compress_file(path: Path) -> Path:
    """Gzip ``path`` to a sibling ``.gz`` file and remove the original.

    On failure the original is kept and returned.
    """
    gz_path = path.with_name(path.name + ".gz")
    try:
        with open(path, "rb") as src, gzip.open(gz_path, "wb") as dst:
            shutil.copyfileobj(src, dst)
    except OSError as e:
        logger.error("Compression of %s failed, keeping uncompressed file: %s", path, e)
        gz_path.unlink(missing_ok=True)
        return path

    try:
        path.unlink()
    except OSError as e:
        logger.error("Could not remove %s after compression: %s", path, e)
    return gz_path


@dataclass
class FileSinkState:
    """Mutable state of a rotating file sink, owned by one worker."""

    handle: Optional[TextIO] = None
    path: Optional[Path] = None
    bytes_written: int = 0
    sequence: int = 0
    rows_since_check: int = 0


class RotatingFileSink(Sink):
    """Delimited text files with size-based rotation.

    Files are named ``{file_name}[_{worker}]_{seq:07d}.{tsv|csv}`` and opened
    on first write, so a stream without rows leaves no file behind. The
    size is checked once every ``size_check_interval`` rows against
    ``max_size_mb * rotate_factor``; with compression on, the uncompressed
    byte count is first discounted by ``compression_ratio`` since the
    threshold targets the compressed file.

    Examples:
        >>> sink = RotatingFileSink(params, worker_id=2)
        >>> sink.write_row(["1", '"a"'])
        >>> result = sink.close()
        >>> result.files
        ['out/orders_2_0000001.tsv']
    """

    def __init__(self, params: UnloadParams, worker_id: int = 0):
        """Initialize file sink.

        Args:
            params: Run parameters
            worker_id: Owning worker; part of the file name only when
                several workers share a ranged run
        """
        super().__init__(params, worker_id)
        self.state = FileSinkState()
        self.files: list[str] = []
        self.file_tag: Optional[int] = (
            worker_id if params.is_ranged and params.parallel > 1 else None
        )
        self._closed = False

    def write_row(self, row: list[str]) -> None:
        """Write one row, rotating first if the size check says so.

        Raises:
            SinkError: If a new output file cannot be created or written
        """
        state = self.state

        state.rows_since_check += 1
        if state.rows_since_check >= self.params.size_check_interval:
            state.rows_since_check = 0
            if state.handle is not None and self._should_rotate():
                self._close_current()

        if state.handle is None:
            self._open_next()

        line = self.params.delimiter.join(row) + "\n"
        try:
            state.handle.write(line)
        except OSError as e:
            raise SinkError(f"Write to {state.path} failed: {e}") from e
        state.bytes_written += len(line.encode("utf-8"))
        self.rows_written += 1

    def close(self) -> SinkResult:
        """Close (and compress) the current file.

        Returns:
            SinkResult listing the files in sequence order
        """
        if not self._closed:
            self._closed = True
            if self.state.handle is not None:
                self._close_current()
        return SinkResult(rows_written=self.rows_written, files=list(self.files))

    @property
    def effective_bytes(self) -> float:
        """Expected size of the current file once finalized."""
        ratio = self.params.compression_ratio if self.params.compress else 1.0
        return self.state.bytes_written * ratio

    def _should_rotate(self) -> bool:
        return self.effective_bytes >= self.params.max_size_bytes * self.params.rotate_factor

    def _open_next(self) -> None:
        state = self.state
        state.sequence += 1
        path = output_path(self.params.file_name, self.params.extension, state.sequence, self.file_tag)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise SinkError(f"Cannot create output file {path}: {e}") from e

        state.handle = handle
        state.path = path
        state.bytes_written = 0
        logger.info("[worker %s] writing %s", self.worker_id, path)

    def _close_current(self) -> None:
        state = self.state
        handle, path = state.handle, state.path
        state.handle = None
        state.path = None

        try:
            handle.close()
        except OSError as e:
            logger.error("[worker %s] closing %s failed: %s", self.worker_id, path, e)

        if self.params.compress:
            path = compress_file(path)
            logger.info("[worker %s] compressed %s", self.worker_id, path)
        self.files.append(str(path))
