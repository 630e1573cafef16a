"""
Alignment Service

Streaming window alignment of VCF genotype calls and FASTA output assembly.
"""

from .window_engine import WindowEngine
from .assembler import FastaArtifact, assemble_fasta, format_fasta_block

__all__ = [
    "WindowEngine",
    "FastaArtifact",
    "assemble_fasta",
    "format_fasta_block",
]
