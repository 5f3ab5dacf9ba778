from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for one annotation batch."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished batch.

    Format:
    SUMMARY rosters={n} keys={k} log_rows={indexed}/{skipped} cells={m} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 5, 9, 0, 0, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     files=[], index_keys=3, indexed_rows=4, skipped_rows=1,
        ...     start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY rosters=0 keys=3 log_rows=4/1 cells=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY rosters={len(result.files)} "
        f"keys={result.index_keys} "
        f"log_rows={result.indexed_rows}/{result.skipped_rows} "
        f"cells={result.total_cells_written} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
