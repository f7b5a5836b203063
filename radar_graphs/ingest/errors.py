from __future__ import annotations

from pathlib import Path
from typing import Union


class IngestError(ValueError):
    """A file produced no usable data. Carries the offending path and a readable reason."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = str(reason)
        super().__init__(f"Failed to load '{self.path}': {self.reason}")
