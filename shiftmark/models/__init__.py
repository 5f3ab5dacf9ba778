"""Domain models: typed spreadsheet grids, batch results and error records."""

from .error_record import ErrorRecord
from .grid import Cell, CellKind, Grid, canonical_date
from .processing_result import AnnotatedFile, ProcessingResult, Upload

__all__ = [
    # Grid models
    "Cell",
    "CellKind",
    "Grid",
    "canonical_date",
    # Processing models
    "AnnotatedFile",
    "ProcessingResult",
    "Upload",
    "ErrorRecord",
]
