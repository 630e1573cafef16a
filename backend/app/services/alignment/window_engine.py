"""
Window Engine: streaming alignment of per-sample alleles against the reference.

Records arrive in genomic order. The engine keeps a sliding window of
columns, one per reference position that has not been flushed yet. Each
column holds one optional replacement per track (samples first, the
reference track last). When a record starts at or beyond the end of the
window, the window is flushed: every column is padded to its widest
replacement with the gap character and appended to the per-track output.
"""

import logging
from typing import List, Optional

from app.services.vcf.parser import VariantRecord, VcfParseError, resolve_replacement

logger = logging.getLogger(__name__)

WindowColumn = List[Optional[str]]


class WindowEngine:
    """
    Aligns variant records into equal-length per-track sequences.

    Tracks 0..sample_count-1 are the samples in declared order; track
    `sample_count` is the reference.
    """

    def __init__(self, sample_count: int, *, gap_char: str = "-", placeholder: str = "N"):
        if sample_count < 0:
            raise ValueError("sample_count must be non-negative")
        self.sample_count = sample_count
        self.reference_slot = sample_count
        self.gap_char = gap_char
        self.placeholder = placeholder

        self.window: List[WindowColumn] = []
        self.window_end = 0
        self.prev_chromosome: Optional[str] = None
        self.results: List[List[str]] = [[] for _ in range(sample_count + 1)]

        self.records_processed = 0
        self.columns_flushed = 0
        self._finished = False

    @property
    def track_count(self) -> int:
        return self.sample_count + 1

    @property
    def window_start(self) -> int:
        """Absolute position of column 0."""
        return self.window_end - len(self.window)

    def _empty_column(self) -> WindowColumn:
        return [None] * self.track_count

    def process(self, record: VariantRecord) -> None:
        if self._finished:
            raise RuntimeError("WindowEngine.finish() was already called")
        if len(record.samples) != self.sample_count:
            raise ValueError(
                f"Record has {len(record.samples)} sample calls, engine expects {self.sample_count}"
            )

        if record.chromosome != self.prev_chromosome:
            # keep the outgoing chromosome's trailing bases
            self.flush()
            logger.info("Entering chromosome %s", record.chromosome)
            self.window_end = 0
            self.prev_chromosome = record.chromosome

        position = record.position
        if position >= self.window_end:
            self.flush()
            self.window_end = position

        reference = record.reference
        min_window_end = position + len(reference)
        for _ in range(self.window_end, min_window_end):
            self.window.append(self._empty_column())
        if min_window_end > self.window_end:
            self.window_end = min_window_end

        window_pos = position - self.window_start
        if window_pos < 0:
            raise VcfParseError(
                f"Record {record.chromosome}:{position} is out of order "
                f"(window starts at {self.window_start})."
            )

        for si, call in enumerate(record.samples):
            if self.window[window_pos][si] is not None:
                continue

            replacement = resolve_replacement(call, reference, record.alternates)
            if replacement is None:
                continue

            span = len(reference)
            if len(replacement) >= span:
                # one base per column; surplus bases widen the last column
                for i in range(span - 1):
                    self._claim(window_pos + i, si, replacement[i])
                self._claim(window_pos + span - 1, si, replacement[span - 1:])
                continue

            for i, base in enumerate(replacement):
                self._claim(window_pos + i, si, base)
            for i in range(len(replacement), span):
                self._claim(window_pos + i, si, self.gap_char)

        for i, base in enumerate(reference):
            self._claim(window_pos + i, self.reference_slot, base)

        self.records_processed += 1

    def _claim(self, column: int, slot: int, value: str) -> None:
        # first writer wins
        if self.window[column][slot] is None:
            self.window[column][slot] = value

    def flush(self) -> int:
        """Pad and emit every buffered column, then clear the window."""
        if not self.window:
            return 0

        segments: List[List[str]] = [[] for _ in range(self.track_count)]
        for column in self.window:
            replacements = [self.placeholder if r is None else r for r in column]
            width = max(len(r) for r in replacements)
            for segment, replacement in zip(segments, replacements):
                segment.append(replacement.ljust(width, self.gap_char))

        for buffer, segment in zip(self.results, segments):
            buffer.append("".join(segment))

        flushed = len(self.window)
        self.columns_flushed += flushed
        self.window = []
        logger.debug("Flushed %d column(s), window end %d", flushed, self.window_end)
        return flushed

    def finish(self) -> List[List[str]]:
        """Flush the trailing window and return the per-track segment buffers."""
        if not self._finished:
            self.flush()
            self._finished = True
            logger.info(
                "Aligned %d record(s) into %d column(s)",
                self.records_processed, self.columns_flushed,
            )
        return self.results

    def segments(self, track: int) -> List[str]:
        """Flushed segments of one track, one entry per flush."""
        if not 0 <= track < self.track_count:
            raise IndexError(f"Track {track} out of range (engine has {self.track_count})")
        return list(self.results[track])

    def sequences(self) -> List[str]:
        """Concatenated output of every track flushed so far."""
        return ["".join(buffer) for buffer in self.results]
