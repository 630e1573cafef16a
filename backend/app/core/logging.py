"""
Root logging setup. Importing this module configures logging once.
"""

import logging
import sys

from app.core.config import get_config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Install a stderr handler on the root logger, or just adjust its level."""
    root = logging.getLogger()
    level_name = (level or get_config().log_level).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if any(getattr(h, "_vcf2fasta", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._vcf2fasta = True
    root.addHandler(handler)


configure_logging()
