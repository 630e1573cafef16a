"""
Conversion Pipeline — Orchestrates bytes → lines → records → alignment → FASTA.

One call to `convert` owns one WindowEngine; nothing is shared between
conversions. Any failure propagates to the caller and no artifact is
returned.
"""
import logging
import time
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence, Union

from app.core.callbacks import notify
from app.core.config import ConverterConfig, get_config
from app.services.alignment import FastaArtifact, WindowEngine, assemble_fasta
from app.services.vcf.line_source import (
    CancellationToken,
    iter_bytes_chunks,
    iter_file_chunks,
    iter_lines,
)
from app.services.vcf.parser import VcfParseError, iter_records

logger = logging.getLogger(__name__)

# Streaming progress stops short of 1.0; 1.0 means the artifact exists.
MAX_STREAMING_PROGRESS = 0.99


def split_sample_names(text: str) -> List[str]:
    """Split a whitespace-separated list of sample names."""
    return text.split()


class _ProgressRelay:
    """Turns cumulative byte counts into monotonic fractions."""

    def __init__(self, total_size: Optional[int], callback: Optional[Callable[[float], Any]]):
        self.total_size = total_size
        self.callback = callback
        self.last = 0.0

    async def on_bytes(self, bytes_read: int) -> None:
        if not self.total_size:
            return
        await self._emit(min(bytes_read / self.total_size, MAX_STREAMING_PROGRESS))

    async def complete(self) -> None:
        await self._emit(1.0)

    async def _emit(self, fraction: float) -> None:
        if fraction < self.last:
            return
        self.last = fraction
        await notify(self.callback, fraction)


async def convert(
    chunks: AsyncIterator[bytes],
    total_size: Optional[int],
    sample_names: Sequence[str],
    *,
    on_progress: Optional[Callable[[float], Any]] = None,
    cancel_token: Optional[CancellationToken] = None,
    config: Optional[ConverterConfig] = None,
) -> FastaArtifact:
    """
    Convert a VCF byte stream into aligned per-sample FASTA.

    - **chunks**: async iterator of raw bytes
    - **total_size**: expected byte count, or None when unknown
    - **sample_names**: one name per genotype column, in column order
    """
    config = config or get_config()
    names = list(sample_names)
    if not names:
        raise VcfParseError("At least one sample name is required.")

    start_time = time.perf_counter()
    progress = _ProgressRelay(total_size, on_progress)

    lines = iter_lines(
        chunks,
        total_size,
        on_progress=progress.on_bytes,
        cancel_token=cancel_token,
        encoding=config.stream.encoding,
    )
    engine = WindowEngine(
        len(names),
        gap_char=config.symbols.gap_char,
        placeholder=config.symbols.placeholder,
    )

    async for record in iter_records(
        lines,
        names,
        comment_prefix=config.stream.comment_prefix,
        cancel_token=cancel_token,
    ):
        engine.process(record)

    tracks = engine.finish()
    if cancel_token is not None:
        cancel_token.raise_if_canceled()

    if config.include_reference_track:
        names.append(config.reference_track_name)
    else:
        tracks = tracks[:-1]

    artifact = assemble_fasta(
        names,
        tracks,
        filename=config.output_filename,
        encoding=config.stream.encoding,
    )
    await progress.complete()

    logger.info(
        "Converted %d record(s) for %d sample(s) in %.2fs (sequence length %d)",
        engine.records_processed,
        len(sample_names),
        time.perf_counter() - start_time,
        artifact.sequence_length,
    )
    return artifact


async def convert_bytes(
    data: bytes,
    sample_names: Sequence[str],
    **kwargs: Any,
) -> FastaArtifact:
    config = kwargs.get("config") or get_config()
    chunks = iter_bytes_chunks(data, config.stream.chunk_size)
    return await convert(chunks, len(data), sample_names, **kwargs)


async def convert_file(
    path: Union[str, Path],
    sample_names: Sequence[str],
    **kwargs: Any,
) -> FastaArtifact:
    path = Path(path)
    config = kwargs.get("config") or get_config()
    chunks = iter_file_chunks(path, config.stream.chunk_size)
    return await convert(chunks, path.stat().st_size, sample_names, **kwargs)
