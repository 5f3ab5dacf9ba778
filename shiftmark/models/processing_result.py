from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for one annotation batch (one log + N rosters)."""


@dataclass(frozen=True)
class Upload:
    """A spreadsheet handed to the pipeline (from multipart form or CLI)."""
    filename: str
    content: bytes


@dataclass(frozen=True)
class AnnotatedFile:
    """Per-roster output."""
    source_name: str  # アップロード時のファイル名
    filename: str  # updated_<source_name>
    content: bytes
    sheet_name: str
    cells_written: int


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of a batch, in roster input order."""
    files: list[AnnotatedFile]
    index_keys: int  # punch index size
    indexed_rows: int  # log rows used
    skipped_rows: int  # log rows without id / date / time
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def total_cells_written(self) -> int:
        return sum(f.cells_written for f in self.files)

    @property
    def primary(self) -> AnnotatedFile:
        """The first annotated roster (the one returned over HTTP by default)."""
        return self.files[0]
