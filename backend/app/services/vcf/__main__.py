from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

from app.core.config import get_config
from app.core.errors import ConversionCanceled, ConversionError
from app.core.logging import configure_logging
from app.services.pipeline.conversion_pipeline import convert_file, split_sample_names

from .line_source import CancellationToken

logger = logging.getLogger("vcf2fasta")

USAGE = 'Usage: python -m app.services.vcf <path-to.vcf> --samples "NAME1 NAME2 ..." [--out output.fasta] [--no-ref]'


def _option(argv: list[str], flag: str) -> str | None:
    idx = argv.index(flag)
    if idx + 1 >= len(argv):
        raise ValueError(f"{flag} requires an argument")
    return argv[idx + 1]


def main(argv: list[str]) -> int:
    if len(argv) < 2 or "--help" in argv:
        print(USAGE)
        return 0

    path = Path(argv[1])
    if not path.is_file():
        print(f"File not found: {path}")
        return 2

    config = get_config()
    try:
        if "--samples" not in argv:
            raise ValueError("--samples is required")
        sample_names = split_sample_names(_option(argv, "--samples"))
        out_path = Path(_option(argv, "--out")) if "--out" in argv else Path(config.output_filename)
    except ValueError as e:
        print(f"Error: {e}")
        print(USAGE)
        return 2

    if "--no-ref" in argv:
        config = config.model_copy(update={"include_reference_track": False})

    configure_logging(config.log_level)

    token = CancellationToken()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())

    def log_progress(fraction: float) -> None:
        logger.info("Progress: %.1f%%", fraction * 100)

    try:
        artifact = asyncio.run(
            convert_file(
                path,
                sample_names,
                on_progress=log_progress,
                cancel_token=token,
                config=config,
            )
        )
    except ConversionCanceled as e:
        print(f"Canceled: {e}")
        return 130
    except ConversionError as e:
        print(f"Error: {e}")
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    try:
        artifact.write_to(out_path)
    except OSError as e:
        print(f"Error: cannot write {out_path}: {e}")
        return 1

    payload = {
        "input": str(path),
        "output": str(out_path),
        "records": list(artifact.sample_names),
        "sequence_length": artifact.sequence_length,
        "bytes_written": artifact.size,
    }
    print(json.dumps(payload, indent=2))
    return 0


def cli() -> None:
    raise SystemExit(main(sys.argv))


if __name__ == "__main__":
    cli()
