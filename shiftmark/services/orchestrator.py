from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from ..config.loader import AppConfig
from ..excel.reader import load_roster, read_log_grid, save_roster
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..logging.init import log_summary
from ..models.processing_result import AnnotatedFile, ProcessingResult, Upload
from .progress import ProgressTracker
from .punch_index import MissingColumnsError, PunchIndex, build_index
from .roster_annotator import annotate
from .summary import render_summary_line

logger = logging.getLogger(__name__)

"""Batch orchestration: one log report + N roster sheets.

1. Decode the log report and build the punch index (once)
2. Decode, annotate and re-encode each roster in input order
3. Aggregate a ProcessingResult and log the SUMMARY line

Failures are all-or-nothing: MissingColumnsError passes through unchanged
(before any roster is touched), everything else is wrapped as
UnexpectedProcessingError. Either way one record is written to the error log.
"""

__all__ = [
    "OUTPUT_PREFIX",
    "ProcessingError",
    "UnexpectedProcessingError",
    "process_all",
]

OUTPUT_PREFIX = "updated_"


class ProcessingError(Exception):
    """Base exception for processing errors."""
    pass


class UnexpectedProcessingError(ProcessingError):
    """Any failure other than missing log columns (bad upload, corrupt workbook, ...)."""
    pass


def _check_uploads(log_upload: Upload | None, rosters: Sequence[Upload], max_rosters: int) -> Upload:
    if log_upload is None:
        raise UnexpectedProcessingError("log report file is required")
    if not rosters:
        raise UnexpectedProcessingError("at least one department sheet is required")
    if len(rosters) > max_rosters:
        raise UnexpectedProcessingError(
            f"too many department sheets: {len(rosters)} (max {max_rosters})"
        )
    return log_upload


def _annotate_roster(upload: Upload, index: PunchIndex, config: AppConfig) -> AnnotatedFile:
    roster = load_roster(upload.filename, upload.content)
    written = annotate(roster.grid, index, config.date_format, sheet_name=roster.sheet_name)
    return AnnotatedFile(
        source_name=upload.filename,
        filename=f"{OUTPUT_PREFIX}{upload.filename}",
        content=save_roster(roster),
        sheet_name=roster.sheet_name,
        cells_written=written,
    )


def _record_failure(config: AppConfig, file: str, error_type: str, message: str) -> None:
    buffer = ErrorLogBuffer(config.error_log_dir)
    buffer.append(ErrorRecord.create(file=file, sheet="", row=-1, error_type=error_type, message=message))
    try:
        path = buffer.flush()
    except OSError as e:
        logger.warning(f"error log write failed: {e}")
        return
    logger.debug(f"error log written: {path}")


def process_all(
    log_upload: Upload | None,
    rosters: Sequence[Upload],
    config: AppConfig,
    *,
    show_progress: bool = False,
) -> ProcessingResult:
    """Run one annotation batch.

    Args:
        log_upload: The attendance log report
        rosters: Department roster sheets, annotated in this order
        config: Application config (date format, roster limit, error log dir)
        show_progress: Display a tqdm bar over rosters (TTY only)

    Returns:
        ProcessingResult with one AnnotatedFile per roster, in input order

    Raises:
        MissingColumnsError: log report lacks employee id / date / time columns
        UnexpectedProcessingError: any other failure
    """
    start_time = datetime.now(UTC)
    current_file = log_upload.filename if log_upload is not None else ""
    try:
        log_report = _check_uploads(log_upload, rosters, config.max_roster_files)
        logger.info(f"log report: {log_report.filename} rosters={len(rosters)}")
        index = build_index(read_log_grid(log_report.content), config.date_format)

        files: list[AnnotatedFile] = []
        with ProgressTracker(len(rosters), enabled=show_progress) as progress:
            for upload in rosters:
                current_file = upload.filename
                progress.start_file(upload.filename)
                annotated = _annotate_roster(upload, index, config)
                progress.finish_file(annotated.cells_written)
                logger.info(f"roster {upload.filename}: cells_written={annotated.cells_written}")
                files.append(annotated)
    except MissingColumnsError as e:
        logger.error(f"{current_file}: {e}")
        _record_failure(config, current_file, "MISSING_COLUMNS", str(e))
        raise
    except UnexpectedProcessingError as e:
        logger.error(f"processing: {e}")
        _record_failure(config, current_file, "UNEXPECTED_PROCESSING", str(e))
        raise
    except Exception as e:
        logger.exception(f"processing failed at {current_file}: {e}")
        _record_failure(config, current_file, "UNEXPECTED_PROCESSING", str(e))
        raise UnexpectedProcessingError(str(e)) from e

    end_time = datetime.now(UTC)
    result = ProcessingResult(
        files=files,
        index_keys=len(index),
        indexed_rows=index.indexed_rows,
        skipped_rows=index.skipped_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )
    # render_summary_line が "SUMMARY " を付けるので除いてから出力
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return result
