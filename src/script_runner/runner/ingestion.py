"""Ingestion adapters that turn stdin or a directory tree into work items."""

from __future__ import annotations

import logging
import os
import select
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from script_runner.runner.errors import InputDirectoryNotFoundError, InputNotADirectoryError
from script_runner.runner.store import WorkItemStore

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


def ingest_stdin(store: WorkItemStore, stream: BinaryIO) -> int:
    """Admit one work item holding whatever stdin has buffered right now.

    The presence check never blocks: when nothing is available at the moment
    of the check, no item is admitted. This is a heuristic, not a reliable
    end-of-input detection, so input that arrives late is ignored.
    """

    payload = read_available_input(stream)
    if not payload:
        logger.debug("No input available on stdin; no work items admitted")
        return 0
    store.admit(payload)
    return 1


def read_available_input(stream: BinaryIO) -> bytes:
    """Read the bytes available on ``stream`` without waiting for more."""

    try:
        descriptor = stream.fileno()
    except (AttributeError, OSError, ValueError):
        # In-memory buffers have no descriptor and are already complete.
        return stream.read()

    chunks: list[bytes] = []
    while _input_pending(descriptor):
        chunk = os.read(descriptor, _READ_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _input_pending(descriptor: int) -> bool:
    try:
        readable, _, _ = select.select([descriptor], [], [], 0)
    except (OSError, ValueError):
        # select() only accepts sockets on Windows.
        logger.debug("Input availability probe unsupported for fd=%d", descriptor, exc_info=True)
        return False
    return bool(readable)


def ingest_directory(store: WorkItemStore, input_dir: str | Path) -> int:
    """Admit one work item per regular file found under ``input_dir``.

    Files are visited in the order ``os.walk`` yields them (top-down, directory
    listing order, unsorted). Unreadable files are logged and skipped.
    """

    root = Path(input_dir)
    if not root.exists():
        raise InputDirectoryNotFoundError(f"Input file directory does not exist: {input_dir}")
    if not root.is_dir():
        raise InputNotADirectoryError(f"Input file location is not a directory: {input_dir}")

    admitted = 0
    for file_path in _iter_regular_files(root):
        try:
            content = file_path.read_bytes()
        except OSError:
            logger.exception("Failed to read input file %s", file_path)
            continue
        store.admit(content, {"filename": file_path.name})
        admitted += 1

    logger.info("Admitted %d work items from %s", admitted, root)
    return admitted


def _iter_regular_files(root: Path) -> Iterator[Path]:
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        for filename in filenames:
            path = Path(dirpath, filename)
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def _log_walk_error(error: OSError) -> None:
    logger.error("Failed to traverse %s", error.filename, exc_info=error)
