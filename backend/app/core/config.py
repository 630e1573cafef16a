"""
Configuration for the VCF to FASTA converter.
Centralizes alignment symbols, stream settings and output naming.
"""

import json
import os
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field

# Load .env file (walks up directories to find it)
load_dotenv(find_dotenv())

ENV_PREFIX = "VCF2FASTA_"


class AlignmentSymbols(BaseModel):
    """Characters written into the aligned output."""

    gap_char: str = Field(
        default="-",
        min_length=1,
        max_length=1,
        description="Padding symbol for columns where a track contributes no base"
    )

    placeholder: str = Field(
        default="N",
        min_length=1,
        max_length=1,
        description="Symbol emitted for a no-call ('.') genotype"
    )


class StreamConfig(BaseModel):
    """How input bytes are read and decoded."""

    chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Bytes requested from the source per read"
    )

    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the VCF input"
    )

    comment_prefix: str = Field(
        default="##",
        min_length=1,
        description="Lines starting with this marker are skipped entirely"
    )


class ConverterConfig(BaseModel):
    """Main configuration for the converter."""

    symbols: AlignmentSymbols = Field(
        default_factory=AlignmentSymbols,
        description="Alignment symbol configuration"
    )

    stream: StreamConfig = Field(
        default_factory=StreamConfig,
        description="Input stream configuration"
    )

    # Output
    include_reference_track: bool = Field(
        default=True,
        description="Append the reference sequence as an extra FASTA record"
    )

    reference_track_name: str = Field(
        default="ref",
        min_length=1,
        description="Label of the reference FASTA record"
    )

    output_filename: str = Field(
        default="output.fasta",
        description="Filename offered for downloads and used by the CLI by default"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level for the service and CLI"
    )


def _from_environment() -> ConverterConfig:
    overrides = {}
    symbols = {}
    stream = {}

    if os.environ.get(f"{ENV_PREFIX}GAP_CHAR"):
        symbols["gap_char"] = os.environ[f"{ENV_PREFIX}GAP_CHAR"]
    if os.environ.get(f"{ENV_PREFIX}PLACEHOLDER"):
        symbols["placeholder"] = os.environ[f"{ENV_PREFIX}PLACEHOLDER"]
    if os.environ.get(f"{ENV_PREFIX}CHUNK_SIZE"):
        stream["chunk_size"] = int(os.environ[f"{ENV_PREFIX}CHUNK_SIZE"])
    if os.environ.get(f"{ENV_PREFIX}ENCODING"):
        stream["encoding"] = os.environ[f"{ENV_PREFIX}ENCODING"]
    if os.environ.get(f"{ENV_PREFIX}REFERENCE_TRACK_NAME"):
        overrides["reference_track_name"] = os.environ[f"{ENV_PREFIX}REFERENCE_TRACK_NAME"]
    if os.environ.get(f"{ENV_PREFIX}INCLUDE_REFERENCE"):
        overrides["include_reference_track"] = (
            os.environ[f"{ENV_PREFIX}INCLUDE_REFERENCE"].strip().lower() not in ("0", "false", "no")
        )
    if os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        overrides["log_level"] = os.environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()

    if symbols:
        overrides["symbols"] = AlignmentSymbols(**symbols)
    if stream:
        overrides["stream"] = StreamConfig(**stream)
    return ConverterConfig(**overrides)


# Global configuration instance
_config: ConverterConfig = _from_environment()


def get_config() -> ConverterConfig:
    """Get the global configuration instance."""
    return _config


def update_config(**kwargs) -> ConverterConfig:
    """Update configuration parameters."""
    global _config
    current_dict = _config.model_dump()

    # Update nested parameters
    for key, value in kwargs.items():
        if '.' in key:
            # Handle nested keys like 'symbols.gap_char'
            parts = key.split('.')
            current = current_dict
            for part in parts[:-1]:
                current = current[part]
            current[parts[-1]] = value
        else:
            current_dict[key] = value

    _config = ConverterConfig(**current_dict)
    return _config


def reset_config(config: Optional[ConverterConfig] = None) -> ConverterConfig:
    """Replace the global configuration (defaults + environment when None)."""
    global _config
    _config = config if config is not None else _from_environment()
    return _config


def load_config_from_file(filepath: str) -> ConverterConfig:
    """Load configuration from a JSON file."""
    global _config

    with open(filepath, 'r') as f:
        config_dict = json.load(f)

    _config = ConverterConfig(**config_dict)
    return _config


def save_config_to_file(filepath: str):
    """Save current configuration to a JSON file."""
    with open(filepath, 'w') as f:
        json.dump(_config.model_dump(), f, indent=2)
