from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Dict, Optional, Sequence, Tuple

from app.core.errors import ConversionError
from .line_source import CancellationToken

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS: Tuple[str, ...] = ("#CHROM", "POS", "REF", "ALT", "FORMAT")

# Leading locus component of a genotype token: "0", "1", "12", "." ...
GENOTYPE_LOCUS = re.compile(r"^(\d+|\.)")

NO_CALL = "."


class VcfParseError(ConversionError, ValueError):
    pass


class SampleCountMismatch(VcfParseError):
    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        super().__init__(f"Found {found} samples, but {expected} names were given.")


@dataclass(frozen=True)
class VcfHeaderInfo:
    columns: Tuple[str, ...]
    sample_columns: Tuple[str, ...]
    meta_lines: Tuple[str, ...] = ()
    positions: Dict[str, int] = field(default_factory=dict, compare=False, repr=False)

    @property
    def sample_count(self) -> int:
        return len(self.sample_columns)


@dataclass(frozen=True)
class VariantRecord:
    chromosome: str
    position: int  # 1-based
    reference: str
    alternates: Tuple[str, ...]
    samples: Tuple[str, ...]


def parse_header(
    line: str,
    sample_names: Sequence[str],
    *,
    meta_lines: Sequence[str] = (),
) -> VcfHeaderInfo:
    """
    Validate the column header row against the declared sample names.

    Sample columns are everything after FORMAT; their count must equal
    len(sample_names), otherwise SampleCountMismatch is raised.
    """
    columns = tuple(line.rstrip("\r\n").split("\t"))

    positions: Dict[str, int] = {}
    for i, name in enumerate(columns):
        positions.setdefault(name, i)

    missing = [c for c in REQUIRED_COLUMNS if c not in positions]
    if missing:
        raise VcfParseError(
            f"Invalid VCF header: missing column(s) {', '.join(missing)}."
        )

    format_index = positions["FORMAT"]
    found = len(columns) - 1 - format_index
    if found != len(sample_names):
        raise SampleCountMismatch(expected=len(sample_names), found=found)

    return VcfHeaderInfo(
        columns=columns,
        sample_columns=columns[format_index + 1:],
        meta_lines=tuple(meta_lines),
        positions=positions,
    )


def parse_record(line: str, header: VcfHeaderInfo) -> VariantRecord:
    cols = line.rstrip("\r\n").split("\t")
    if len(cols) != len(header.columns):
        raise VcfParseError(
            f"Invalid VCF record (expected {len(header.columns)} columns, "
            f"found {len(cols)}): {line[:80]}"
        )

    pos_s = cols[header.positions["POS"]]
    try:
        position = int(pos_s)
    except ValueError:
        raise VcfParseError(f"Invalid POS value {pos_s!r}: {line[:80]}") from None
    if position < 1:
        raise VcfParseError(f"POS must be a positive 1-based integer, got {position}.")

    reference = cols[header.positions["REF"]]
    if not reference:
        raise VcfParseError(f"Empty REF allele at position {position}.")

    count = header.sample_count
    return VariantRecord(
        chromosome=cols[header.positions["#CHROM"]],
        position=position,
        reference=reference,
        alternates=tuple(cols[header.positions["ALT"]].split(",")),
        samples=tuple(cols[len(cols) - count:]) if count else (),
    )


def resolve_replacement(call: str, reference: str, alternates: Sequence[str]) -> Optional[str]:
    """
    Resolve a genotype token to the allele it selects.

    Only the leading locus component is considered ("1|0" -> "1", "./." -> ".").
    Returns None for a no-call, the reference for "0", otherwise the 1-based
    alternate.
    """
    match = GENOTYPE_LOCUS.match(call)
    if match is None:
        raise VcfParseError(f"Unrecognized genotype call {call!r}.")

    locus = match.group(1)
    if locus == NO_CALL:
        return None

    index = int(locus)
    if index == 0:
        return reference
    if index > len(alternates):
        raise VcfParseError(
            f"Genotype call {call!r} refers to alternate {index}, "
            f"but only {len(alternates)} are listed."
        )
    return alternates[index - 1]


async def iter_records(
    lines: AsyncIterable[str],
    sample_names: Sequence[str],
    *,
    comment_prefix: str = "##",
    cancel_token: Optional[CancellationToken] = None,
) -> AsyncIterator[VariantRecord]:
    """
    Yield `VariantRecord`s from a stream of VCF lines.

    Comment lines (`comment_prefix`) and blank lines are skipped. The first
    remaining line must be the column header.
    """
    header: Optional[VcfHeaderInfo] = None
    meta_lines = []

    async for line in lines:
        if cancel_token is not None:
            cancel_token.raise_if_canceled()

        if line.startswith(comment_prefix):
            meta_lines.append(line)
            continue
        if not line.strip():
            continue

        if header is None:
            header = parse_header(line, sample_names, meta_lines=meta_lines)
            logger.info(
                "Parsed VCF header with %d sample column(s) after %d meta line(s)",
                header.sample_count, len(meta_lines),
            )
            continue

        yield parse_record(line, header)

    if header is None:
        raise VcfParseError("Invalid VCF: missing #CHROM header line.")
