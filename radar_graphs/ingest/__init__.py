"""Ingest package - turning delimited telemetry files into series.

This package handles:
- Locale-tolerant number and timestamp parsing of single cells
- Tokenising files with an unknown delimiter and detecting a header row
- Header-driven schema detection (time column, unit, Y priority groups)
- Building named (x, y) series, with a positional fallback when no schema is found

Design principle:
- A cell that does not parse becomes NaN; NaN/inf pairs are dropped when X and Y are paired
- Only a file with no usable row is an error (IngestError)
- Every reader result carries its diagnostics in ``warnings``
"""

from .errors import IngestError
from .csv_rows import LoaderConfig, RawTable, read_rows
from .series_builder import BuildResult, build_series, merge_axis_titles

__all__ = [
    "IngestError",
    "LoaderConfig",
    "RawTable",
    "read_rows",
    "BuildResult",
    "build_series",
    "merge_axis_titles",
]
