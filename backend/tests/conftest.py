import asyncio

import pytest

from app.core.config import ConverterConfig, reset_config

VCF_COLUMNS = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"]


def build_vcf(samples, rows, meta=("##fileformat=VCFv4.2",), newline="\n"):
    """
    Build VCF text. Each row is (chrom, pos, ref, alt, calls) where calls is
    one genotype token per sample.
    """
    lines = list(meta)
    lines.append("\t".join(VCF_COLUMNS + list(samples)))
    for chrom, pos, ref, alt, calls in rows:
        lines.append("\t".join([chrom, str(pos), ".", ref, alt, ".", "PASS", ".", "GT", *calls]))
    return newline.join(lines) + newline


async def collect(agen):
    return [item async for item in agen]


@pytest.fixture
def make_vcf():
    return build_vcf


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def drain():
    """Collect an async iterator into a list."""
    return lambda agen: asyncio.run(collect(agen))


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from built-in defaults, independent of the environment."""
    config = reset_config(ConverterConfig())
    yield config
    reset_config(ConverterConfig())
