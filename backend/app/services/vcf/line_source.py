"""
Streaming text lines from raw byte chunks.

The byte source is any async iterator of ``bytes``. Lines are decoded
incrementally, so multi-byte characters and line terminators may be split
across chunk boundaries. Progress is reported in cumulative bytes after every
chunk, and a CancellationToken is honored at every chunk boundary.
"""
from __future__ import annotations

import asyncio
import codecs
import logging
import re
import threading
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Tuple, Union

from app.core.callbacks import notify
from app.core.errors import ConversionCanceled, TruncatedInput

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r"\r\n|\n|\r")

DEFAULT_CHUNK_SIZE = 64 * 1024


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def canceled(self) -> bool:
        return self._event.is_set()

    def raise_if_canceled(self) -> None:
        if self._event.is_set():
            raise ConversionCanceled()


def _split_complete_lines(text: str, *, final: bool = False) -> Tuple[List[str], str]:
    """Return (complete lines, unterminated remainder)."""
    held = ""
    if not final and text.endswith("\r"):
        # may be the first half of a CRLF split across chunks
        text, held = text[:-1], "\r"

    lines: List[str] = []
    start = 0
    for match in LINE_BREAK.finditer(text):
        lines.append(text[start:match.start()])
        start = match.end()
    return lines, text[start:] + held


async def iter_lines(
    chunks: AsyncIterator[bytes],
    total_size: Optional[int] = None,
    *,
    on_progress: Optional[Callable[[int], Any]] = None,
    cancel_token: Optional[CancellationToken] = None,
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """
    Yield decoded lines (without terminators) from a stream of byte chunks.

    - `on_progress` is awaited with the cumulative byte count after the lines
      of each chunk have been yielded; the next chunk is not requested before
      it returns.
    - Raises ConversionCanceled at the next chunk boundary once `cancel_token`
      is canceled.
    - Raises TruncatedInput when `total_size` is given and the source ends
      early.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    bytes_read = 0
    pending = ""

    async for chunk in chunks:
        if cancel_token is not None:
            cancel_token.raise_if_canceled()

        bytes_read += len(chunk)
        pending += decoder.decode(chunk)
        lines, pending = _split_complete_lines(pending)
        for line in lines:
            yield line

        await notify(on_progress, bytes_read)

    if cancel_token is not None:
        cancel_token.raise_if_canceled()

    if total_size is not None and bytes_read < total_size:
        raise TruncatedInput(expected=total_size, received=bytes_read)

    pending += decoder.decode(b"", final=True)
    lines, pending = _split_complete_lines(pending, final=True)
    for line in lines:
        yield line
    if pending:
        yield pending

    logger.debug("Line source exhausted after %d bytes", bytes_read)


# ---------------------------------------------------------------------------
# Chunk sources
# ---------------------------------------------------------------------------

async def iter_bytes_chunks(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Serve an in-memory buffer in fixed-size chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset:offset + chunk_size])
        # let other tasks (progress pollers, cancel requests) run
        await asyncio.sleep(0)


async def iter_file_chunks(path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Read a file in chunks without blocking the event loop."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    with Path(path).open("rb") as f:
        while True:
            chunk = await asyncio.to_thread(f.read, chunk_size)
            if not chunk:
                break
            yield chunk


async def iter_upload_chunks(upload: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Read a FastAPI/Starlette UploadFile in chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        yield chunk
