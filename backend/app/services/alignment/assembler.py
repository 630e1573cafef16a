from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple, Union

TEXT_PLAIN = "text/plain"


@dataclass(frozen=True)
class FastaArtifact:
    content: bytes
    filename: str
    sample_names: Tuple[str, ...]
    sequence_length: int
    content_type: str = TEXT_PLAIN

    @property
    def size(self) -> int:
        return len(self.content)

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)

    def write_to(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        target.write_bytes(self.content)
        return target


def format_fasta_block(name: str, sequence: str) -> str:
    return f">{name}\n{sequence}\n"


def assemble_fasta(
    names: Sequence[str],
    tracks: Sequence[Sequence[str]],
    *,
    filename: str = "output.fasta",
    encoding: str = "utf-8",
    content_type: str = TEXT_PLAIN,
) -> FastaArtifact:
    """
    Join each track's flushed segments and wrap them as FASTA records.

    `names` and `tracks` are paired in order; the output keeps that order.
    """
    if len(names) != len(tracks):
        raise ValueError(f"Got {len(names)} names for {len(tracks)} tracks")

    sequences = ["".join(segments) for segments in tracks]
    blocks = [format_fasta_block(name, seq) for name, seq in zip(names, sequences)]

    return FastaArtifact(
        content="".join(blocks).encode(encoding),
        filename=filename,
        sample_names=tuple(names),
        sequence_length=len(sequences[0]) if sequences else 0,
        content_type=content_type,
    )
