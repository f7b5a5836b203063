from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from radar_graphs.ingest.errors import IngestError
from radar_graphs.ingest.values import parse_number


@dataclass(frozen=True)
class LoaderConfig:
    """
    Reader configuration for delimited telemetry files.

    delimiters:
      Candidate field separators, in order of preference when several appear in the first line.
    encoding:
      "utf-8-sig" strips a BOM written by spreadsheet exports.
    date_probe_rows:
      Number of leading data rows inspected to decide whether the X column holds wall-clock time.
    max_y_columns:
      Upper bound on the number of Y series built from one file.
    """
    delimiters: Tuple[str, ...] = ("\t", ";", ",")
    quotechar: str = '"'
    encoding: str = "utf-8-sig"
    date_probe_rows: int = 20
    max_y_columns: int = 12


@dataclass(frozen=True)
class HeaderPresent:
    """Row 0 is a header row; data starts at row 1."""
    headers: Tuple[str, ...]

    @property
    def data_start(self) -> int:
        return 1


@dataclass(frozen=True)
class NoHeader:
    """Row 0 is data."""

    @property
    def data_start(self) -> int:
        return 0


HeaderKind = Union[HeaderPresent, NoHeader]


def classify_header(row0: Sequence[str]) -> HeaderKind:
    """Row 0 is data only if its first field and at least one other field parse as numbers."""
    if not row0:
        return NoHeader()
    first_is_number = parse_number(row0[0]) is not None
    other_is_number = any(parse_number(v) is not None for v in row0[1:])
    if first_is_number and other_is_number:
        return NoHeader()
    return HeaderPresent(headers=tuple(row0))



def _strip_quoted(line: str, quotechar: str = '"') -> str:
    q = re.escape(quotechar)
    return re.sub(f"{q}[^{q}]*{q}", "", line)


def guess_delimiter(first_line: str, candidates: Sequence[str] = ("\t", ";", ",")) -> str:
    """
    Pick the field separator from one line.

    Quoted text is ignored. Candidates are tried in order, so a semicolon file with
    comma decimals ("1,5;2,5") is split on semicolons.
    """
    bare = _strip_quoted(first_line)
    for sep in candidates:
        if sep in bare:
            return sep
    return candidates[-1] if candidates else ","


def _cell_value(cell) -> float:
    v = parse_number(cell)
    return np.nan if v is None else v


@dataclass(frozen=True)
class RawTable:
    """
    Tokenised rows of one file (blank rows removed, fields trimmed).

    Notes
    - Rows may be ragged; short rows are padded with NaN at materialisation.
    - warnings collects diagnostics for the caller's log.
    """
    source_path: Path
    delimiter: str
    rows: Tuple[Tuple[str, ...], ...]
    warnings: Tuple[str, ...] = ()

    @property
    def base_name(self) -> str:
        return self.source_path.stem

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    def header(self) -> HeaderKind:
        return classify_header(self.rows[0]) if self.rows else NoHeader()

    def max_columns(self, start: int) -> int:
        return max((len(r) for r in self.rows[start:]), default=0)

    def numeric_matrix(self, start: int) -> np.ndarray:
        """Float64 matrix ``(n_rows - start, max_cols)``; unparseable or missing cells are NaN."""
        data = self.rows[start:]
        ncols = self.max_columns(start)
        if not data or ncols == 0:
            return np.empty((len(data), ncols), dtype=np.float64)
        df = pd.DataFrame(list(data), columns=range(ncols))
        return df.apply(lambda col: col.map(_cell_value)).to_numpy(dtype=np.float64)


def read_rows(file_path: Union[str, Path], config: Optional[LoaderConfig] = None) -> RawTable:
    """
    Read and tokenise a delimited text file.

    The delimiter is taken from the first line holding any candidate separator.
    Lines above that one (a title or export banner) are skipped and reported.

    Raises IngestError when the file cannot be read or contains no usable row.
    """
    cfg = config or LoaderConfig()
    path = Path(file_path).expanduser()
    try:
        text = path.read_text(encoding=cfg.encoding, errors="replace")
    except OSError as e:
        raise IngestError(path, f"cannot read file ({type(e).__name__}: {e})") from e

    lines = [ln for ln in text.splitlines() if ln.strip()]
    n_blank = len(text.splitlines()) - len(lines)
    if not lines:
        raise IngestError(path, "No rows detected.")

    i_table = next(
        (i for i, ln in enumerate(lines) if any(s in _strip_quoted(ln, cfg.quotechar) for s in cfg.delimiters)),
        0,
    )
    sep = guess_delimiter(lines[i_table], cfg.delimiters)
    preamble = lines[:i_table]
    lines = lines[i_table:]

    # Widest line decides the column count so ragged rows do not trip the parser.
    n_fields = max(_strip_quoted(ln, cfg.quotechar).count(sep) + 1 for ln in lines)
    try:
        df = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=sep,
            header=None,
            names=list(range(n_fields)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            quotechar=cfg.quotechar,
            engine="python",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestError(path, f"cannot parse delimited text ({e})") from e

    rows: List[Tuple[str, ...]] = []
    for rec in df.fillna("").itertuples(index=False, name=None):
        fields = [str(v).strip() for v in rec]
        while fields and not fields[-1]:
            fields.pop()
        if not fields:
            n_blank += 1
            continue
        rows.append(tuple(fields))

    if not rows:
        raise IngestError(path, "No rows detected.")

    warnings: List[str] = [f"delimiter={sep!r}, rows={len(rows)}"]
    if preamble:
        warnings.append(f"skipped {len(preamble)} preamble line(s) above the table: {preamble[0]!r}")
    if n_blank:
        warnings.append(f"skipped {n_blank} blank rows")

    return RawTable(source_path=path, delimiter=sep, rows=tuple(rows), warnings=tuple(warnings))
