"""
ISK Import Orchestrator
=======================

One sweep of the UploadHere folder:
1. List every file waiting in UploadHere
2. Per file, on a bounded worker pool:
   a. Download and crop the screenshot to its left half
   b. Upload the crop as a Google Doc in Processed (Drive OCRs it)
   c. Export the Doc as plain text and extract date / member / quantity
   d. Extraction failed  -> screenshot and Doc go to Failed, sheet untouched
      Extraction worked  -> screenshot goes to Processed, a report row is
                            appended, both files renamed
                            "<row>-<doc name>-<checksum>"
3. Wait for every file, return a RunSummary

Guardrails:
- One file's failure never stops the others; it becomes an ERRORED outcome
  and the screenshot is moved to Failed on a best-effort basis.
- Only a failure to list UploadHere propagates to the caller.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from isk_import import config
from isk_import.drive.drive_store import DriveStore
from isk_import.errors import ExtractionError
from isk_import.image_cropper import crop_left_half
from isk_import.models import (
    DerivedDocument,
    FileOutcome,
    FileState,
    ImportContext,
    OutcomeStatus,
    RunSummary,
    SourceFile,
)
from isk_import.sheets.report_sheet import ReportSheet
from isk_import.text_extractor import extract_record
from isk_import.utils.logger import get_logger


def renamed_title(row_id: int, derived_title: str, checksum: str) -> str:
    return f"{row_id}-{derived_title}-{checksum}"


class IngestionOrchestrator:
    """
    Runs the crop → OCR → extract → record → rename pipeline for every
    uploaded screenshot.
    """

    def __init__(
        self,
        context: ImportContext,
        drive: DriveStore,
        sheet: ReportSheet,
        max_workers: Optional[int] = None,
        logger=None,
    ):
        self.context = context
        self.drive = drive
        self.sheet = sheet
        self.max_workers = max_workers or config.MAX_WORKERS
        self.logger = logger or get_logger()

    def _folder_name(self, folder_id: Optional[str]) -> Optional[str]:
        return {
            self.context.upload_folder_id: config.UPLOAD_FOLDER_NAME,
            self.context.processed_folder_id: config.PROCESSED_FOLDER_NAME,
            self.context.failed_folder_id: config.FAILED_FOLDER_NAME,
        }.get(folder_id)

    # ─────────────────────────────────────────────────────────────
    # Batch
    # ─────────────────────────────────────────────────────────────

    def run(self) -> RunSummary:
        """
        Process everything currently in UploadHere and wait for it all.

        Raises:
            Whatever the Drive client raises if UploadHere cannot be listed.
        """
        summary = RunSummary(started_at=datetime.now())
        files = self.drive.list_source_files(self.context.upload_folder_id)
        workers = max(1, min(self.max_workers, len(files)))
        self.logger.log_run_start(len(files), workers)

        if files:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="isk-import") as pool:
                futures = [pool.submit(self.process_file, source) for source in files]
            summary.outcomes = [self._collect(future, source) for future, source in zip(futures, files)]

        summary.finished_at = datetime.now()
        self.logger.log_run_summary(summary)
        return summary

    def _collect(self, future, source: SourceFile) -> FileOutcome:
        try:
            return future.result()
        except Exception as e:
            # process_file handles its own errors; this only guards the pool
            self.logger.error(f"Worker crashed on {source.name}: {e}", component="Orchestrator", exc_info=True)
            return FileOutcome(
                source_id=source.file_id,
                source_name=source.name,
                status=OutcomeStatus.ERRORED,
                state=FileState.UPLOADED,
                error=str(e),
            )

    # ─────────────────────────────────────────────────────────────
    # Single file
    # ─────────────────────────────────────────────────────────────

    def process_file(self, source: SourceFile) -> FileOutcome:
        """Run one screenshot through the pipeline. Never raises."""
        ctx = self.context
        state = FileState.UPLOADED
        source_folder = ctx.upload_folder_id
        derived: Optional[DerivedDocument] = None
        derived_folder = ctx.processed_folder_id
        record = None
        checksum = ""
        row_id = None

        try:
            cropped = crop_left_half(self.drive.download(source.file_id))
            state = FileState.CROPPED

            derived = self.drive.create_document_from_image(
                source.name + config.DERIVED_DOCUMENT_SUFFIX,
                ctx.processed_folder_id,
                cropped,
            )
            text = self.drive.export_text(derived.file_id)
            state = FileState.EXPORTED

            try:
                record = extract_record(text)
            except ExtractionError as e:
                state = FileState.EXTRACT_FAILED
                self.drive.move(source.file_id, source_folder, ctx.failed_folder_id)
                source_folder = ctx.failed_folder_id
                self.drive.move(derived.file_id, derived_folder, ctx.failed_folder_id)
                derived_folder = ctx.failed_folder_id
                state = FileState.QUARANTINED
                return self._outcome(
                    source, OutcomeStatus.QUARANTINED, state,
                    location=config.FAILED_FOLDER_NAME,
                    error=f"{type(e).__name__}: {e}",
                )

            state = FileState.EXTRACTED
            self.drive.move(source.file_id, source_folder, ctx.processed_folder_id)
            source_folder = ctx.processed_folder_id

            result = self.sheet.append_record(record, derived.link)
            checksum = result.checksum
            row_id = result.row_id
            state = FileState.RECORDED
            self.logger.log_sheet_append(row_id, checksum)

            if row_id is None:
                return self._outcome(
                    source, OutcomeStatus.PROCESSED, state,
                    record=record, checksum=checksum,
                    location=config.PROCESSED_FOLDER_NAME,
                    error=f"RowParseError: {result.parse_error}",
                )

            new_name = renamed_title(row_id, derived.name, checksum)
            self.drive.rename(source.file_id, new_name)
            self.drive.rename(derived.file_id, new_name)
            state = FileState.RENAMED
            return self._outcome(
                source, OutcomeStatus.PROCESSED, state,
                record=record, row_id=row_id, checksum=checksum,
                final_name=new_name, location=config.PROCESSED_FOLDER_NAME,
            )

        except Exception as e:
            self.logger.error(
                f"Failed processing {source.name} at {state.value}: {e}",
                component="Orchestrator",
                exc_info=True,
            )
            source_folder = self._quarantine_after_error(source, source_folder, derived, derived_folder)
            return self._outcome(
                source, OutcomeStatus.ERRORED, state,
                record=record, row_id=row_id, checksum=checksum,
                location=self._folder_name(source_folder) if source_folder != ctx.upload_folder_id else None,
                error=f"{type(e).__name__}: {e}",
            )

    def _quarantine_after_error(
        self,
        source: SourceFile,
        source_folder: str,
        derived: Optional[DerivedDocument],
        derived_folder: str,
    ) -> str:
        """
        Move the files of a task that errored out into Failed.

        The screenshot is moved if it is still in UploadHere. The Doc is
        moved if it is still in Processed and the screenshot is not, since
        only a screenshot filed under Processed can have a report row.
        Returns the folder the screenshot ends up in.
        """
        ctx = self.context
        if source_folder == ctx.upload_folder_id:
            try:
                self.drive.move(source.file_id, source_folder, ctx.failed_folder_id)
                source_folder = ctx.failed_folder_id
            except Exception as e:
                self.logger.error(f"Could not move {source.name} to Failed: {e}", component="Orchestrator")

        if (
            derived is not None
            and derived_folder == ctx.processed_folder_id
            and source_folder != ctx.processed_folder_id
        ):
            try:
                self.drive.move(derived.file_id, derived_folder, ctx.failed_folder_id)
            except Exception as e:
                self.logger.error(f"Could not move {derived.name} to Failed: {e}", component="Orchestrator")

        return source_folder

    def _outcome(self, source: SourceFile, status: OutcomeStatus, state: FileState, **kwargs) -> FileOutcome:
        outcome = FileOutcome(
            source_id=source.file_id,
            source_name=source.name,
            status=status,
            state=state,
            **kwargs,
        )
        self.logger.log_file_outcome(outcome)
        return outcome


def run_once(drive: Optional[DriveStore] = None) -> RunSummary:
    """Bootstrap against the configured root folder and run one sweep."""
    from isk_import.bootstrap import bootstrap

    drive = drive or DriveStore()
    context, sheet = bootstrap(drive)
    return IngestionOrchestrator(context, drive, sheet).run()
