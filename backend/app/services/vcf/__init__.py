from .line_source import (
    CancellationToken,
    iter_bytes_chunks,
    iter_file_chunks,
    iter_lines,
    iter_upload_chunks,
)
from .parser import (
    SampleCountMismatch,
    VariantRecord,
    VcfHeaderInfo,
    VcfParseError,
    iter_records,
    parse_header,
    parse_record,
    resolve_replacement,
)

__all__ = [
    "CancellationToken",
    "iter_lines",
    "iter_bytes_chunks",
    "iter_file_chunks",
    "iter_upload_chunks",
    "VariantRecord",
    "VcfHeaderInfo",
    "VcfParseError",
    "SampleCountMismatch",
    "parse_header",
    "parse_record",
    "resolve_replacement",
    "iter_records",
]
