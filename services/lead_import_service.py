"""
CSV lead import service.

Drives one import session through its phases:

    upload -> map -> processing -> success
                 <- processing          (run failed; error kept)
    upload <- map                       ("change file"; state discarded)

Rows are inserted in fixed-size batches, strictly one after another. A
failed batch stops the run; batches already written are not rolled back,
and the failure reports how many rows made it in.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional
import threading
import time
import structlog

from config import get_admin_client, get_supabase_client, get_settings
from models.lead_import import (
    ImportFailure,
    ImportPhase,
    ImportProgress,
    ImportResultResponse,
    ImportSessionResponse,
    LEAD_IMPORT_FIELDS,
)
from parsers.csv_parser import parse_csv, parse_csv_preview
from services.column_mapper import (
    ColumnMapping,
    clean_mapping,
    suggest_mapping,
    validate_mapping,
)
from services.import_session_store import ImportSessionStore
from services.lead_sink import LeadSink, SupabaseLeadSink, describe_sink_error
from services.lead_transformer import transform_batch
from exceptions import (
    ImportBatchError,
    ImportSessionNotFoundError,
    InvalidImportPhaseError,
    CsvParseError,
)

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[ImportProgress], None]
SuccessCallback = Callable[["ImportSession"], None]


@dataclass
class ImportSession:
    """Everything one import needs between upload and completion."""
    id: str
    phase: ImportPhase = ImportPhase.UPLOAD
    filename: Optional[str] = None
    content: bytes = b""
    headers: list[str] = field(default_factory=list)
    preview: list[dict[str, str]] = field(default_factory=list)
    mapping: ColumnMapping = field(default_factory=dict)
    progress: ImportProgress = field(default_factory=ImportProgress)
    error: Optional[ImportFailure] = None
    failures: list[ImportFailure] = field(default_factory=list)

    def reset(self) -> None:
        """Back to upload with nothing kept."""
        self.phase = ImportPhase.UPLOAD
        self.filename = None
        self.content = b""
        self.headers = []
        self.preview = []
        self.mapping = {}
        self.progress = ImportProgress()
        self.error = None
        self.failures = []

    def to_response(self) -> ImportSessionResponse:
        return ImportSessionResponse(
            session_id=self.id,
            phase=self.phase,
            filename=self.filename,
            size_bytes=len(self.content),
            headers=self.headers,
            preview=self.preview,
            fields=list(LEAD_IMPORT_FIELDS),
            mapping=self.mapping,
            progress=self.progress,
            error=self.error,
            previous_failures=self.failures,
        )


def _percent(processed: int, total: int) -> int:
    """Rounded completion percentage (half rounds up)."""
    if total <= 0:
        return 100
    return int(processed * 100 / total + 0.5)


class LeadImportService:
    """
    CSV import business logic.

    The sink, store and sleep function are injected; nothing here talks to
    Supabase directly.

    Routes call this from worker threads. Phase checks and the transitions
    they guard happen under one lock; the batch loop itself runs outside it.
    """

    def __init__(
        self,
        sink: LeadSink,
        store: Optional[ImportSessionStore] = None,
        batch_size: int = 50,
        batch_delay: float = 0.05,
        preview_rows: int = 5,
        enforce_required_fields: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sink = sink
        self.store = store or ImportSessionStore()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.preview_rows = preview_rows
        self.enforce_required_fields = enforce_required_fields
        self.sleep = sleep
        self._lock = threading.Lock()

    # ===================
    # SESSION LIFECYCLE
    # ===================

    def start_session(self, content: bytes, filename: Optional[str] = None) -> ImportSession:
        """
        Open a session from an uploaded file.

        Raises:
            CsvParseError: File unreadable; no session is created
        """
        session = ImportSession(id=self.store.new_id())
        self._load(session, content, filename)
        self.store.store(session.id, session)
        return session

    def load_file(self, session_id: str, content: bytes, filename: Optional[str] = None) -> ImportSession:
        """
        Attach a new file to a session sitting in upload.

        Raises:
            InvalidImportPhaseError: Session is not in upload
            CsvParseError: File unreadable; session stays in upload
        """
        with self._lock:
            session = self.get_session(session_id)
            self._require_phase(session, "load a file", ImportPhase.UPLOAD)
            self._load(session, content, filename)
        return session

    def get_session(self, session_id: str) -> ImportSession:
        """
        Raises:
            ImportSessionNotFoundError: Unknown or expired session
        """
        session = self.store.retrieve(session_id)
        if session is None:
            raise ImportSessionNotFoundError(session_id)
        return session

    def update_mapping(self, session_id: str, raw_mapping: dict[str, Optional[str]]) -> ImportSession:
        """
        Replace the mapping the user is editing.

        Required fields are not checked here; that happens on confirm.

        Raises:
            InvalidImportPhaseError: Session is not in map
            UnknownFieldError / UnknownColumnError: Bad mapping entry
        """
        mapping = clean_mapping(raw_mapping)
        with self._lock:
            session = self.get_session(session_id)
            self._require_phase(session, "edit the mapping", ImportPhase.MAP)
            validate_mapping(mapping, session.headers, enforce_required=False)
            session.mapping = mapping

        logger.info(
            "import_mapping_updated",
            session_id=session_id,
            mapped=sorted(mapping)
        )
        return session

    def change_file(self, session_id: str) -> ImportSession:
        """Discard the file and mapping, go back to upload."""
        with self._lock:
            session = self.get_session(session_id)
            self._require_phase(session, "change the file", ImportPhase.MAP, ImportPhase.UPLOAD)
            session.reset()
        logger.info("import_file_cleared", session_id=session_id)
        return session

    def close(self, session_id: str) -> None:
        """
        Drop a session. Not allowed mid-run.

        Raises:
            InvalidImportPhaseError: Session is processing
        """
        with self._lock:
            session = self.store.retrieve(session_id)
            if session is None:
                return
            if session.phase == ImportPhase.PROCESSING:
                raise InvalidImportPhaseError(
                    "close the import",
                    session.phase.value,
                    [p.value for p in ImportPhase if p != ImportPhase.PROCESSING]
                )
            self.store.delete(session_id)
        logger.info("import_session_closed", session_id=session_id, phase=session.phase.value)

    # ===================
    # IMPORT RUN
    # ===================

    def run_import(
        self,
        session_id: str,
        on_progress: Optional[ProgressCallback] = None,
        on_success: Optional[SuccessCallback] = None,
    ) -> ImportResultResponse:
        """
        Insert every row of the session's file using its confirmed mapping.

        Args:
            session_id: Session in map
            on_progress: Called after each successful batch
            on_success: Called once after the last batch succeeds

        Returns:
            ImportResultResponse with final counts

        Raises:
            InvalidImportPhaseError: Session is not in map
            MissingRequiredFieldsError: Required field unmapped (nothing sent)
            CsvParseError: Full read failed; the session is discarded
            ImportBatchError: A batch was rejected; session back in map

        Any other error raised mid-run, on_progress included, also puts the
        session back in map before it propagates.
        """
        with self._lock:
            session = self.get_session(session_id)
            self._require_phase(session, "start the import", ImportPhase.MAP)
            validate_mapping(
                session.mapping,
                session.headers,
                enforce_required=self.enforce_required_fields
            )
            # Claimed before the full read so a second confirm is refused
            session.phase = ImportPhase.PROCESSING
            session.error = None
            session.progress = ImportProgress()

        try:
            rows = parse_csv(session.content).rows
        except CsvParseError:
            self.store.delete(session_id)
            raise
        except BaseException as e:
            self._stop_run(session, str(e) or type(e).__name__, 0, 0, 0, e)
            raise

        total = len(rows)
        batch_count = (total + self.batch_size - 1) // self.batch_size
        session.progress = ImportProgress(total=total, batch_count=batch_count)

        logger.info(
            "import_started",
            session_id=session_id,
            filename=session.filename,
            rows=total,
            batches=batch_count,
            batch_size=self.batch_size
        )

        processed = 0
        batch_number = 0
        try:
            for batch_number, start in enumerate(range(0, total, self.batch_size), start=1):
                batch = rows[start:start + self.batch_size]
                records = transform_batch(batch, session.mapping)

                try:
                    self.sink.insert_many(records)
                except Exception as e:
                    message = describe_sink_error(e)
                    self._stop_run(session, message, batch_number, processed, total, e)
                    raise ImportBatchError(
                        message=message,
                        failed_batch=batch_number,
                        rows_imported=processed,
                        total_rows=total,
                    ) from e

                processed += len(batch)
                session.progress = ImportProgress(
                    processed=processed,
                    total=total,
                    percent=_percent(processed, total),
                    batch=batch_number,
                    batch_count=batch_count,
                )
                logger.debug(
                    "import_batch_inserted",
                    session_id=session_id,
                    batch=batch_number,
                    processed=processed,
                    percent=session.progress.percent
                )
                if on_progress:
                    on_progress(session.progress)

                if batch_number < batch_count and self.batch_delay > 0:
                    self.sleep(self.batch_delay)
        except ImportBatchError:
            raise
        except BaseException as e:
            self._stop_run(session, str(e) or type(e).__name__, batch_number, processed, total, e)
            raise

        session.phase = ImportPhase.SUCCESS
        session.progress = ImportProgress(
            processed=processed,
            total=total,
            percent=_percent(processed, total),
            batch=batch_count,
            batch_count=batch_count,
        )

        logger.info(
            "import_completed",
            session_id=session_id,
            imported=processed,
            batches=batch_count
        )

        if on_success:
            on_success(session)

        return ImportResultResponse(
            session_id=session_id,
            phase=session.phase,
            imported=processed,
            total=total,
            batches=batch_count,
        )

    # ===================
    # HELPERS
    # ===================

    def _stop_run(
        self,
        session: ImportSession,
        message: str,
        batch_number: int,
        processed: int,
        total: int,
        error: BaseException,
    ) -> None:
        """Hand a failed run back to map with the failure recorded."""
        with self._lock:
            session.phase = ImportPhase.MAP
            session.error = ImportFailure(
                message=message,
                failed_batch=batch_number,
                rows_imported=processed,
                total_rows=total,
            )
            session.failures.append(session.error)

        logger.error(
            "import_batch_failed",
            session_id=session.id,
            batch=batch_number,
            rows_imported=processed,
            total=total,
            error=message,
            error_type=type(error).__name__
        )

    def _load(self, session: ImportSession, content: bytes, filename: Optional[str]) -> None:
        preview = parse_csv_preview(content, rows=self.preview_rows)

        session.filename = filename
        session.content = content
        session.headers = preview.headers
        session.preview = preview.rows
        session.mapping = suggest_mapping(preview.headers)
        session.progress = ImportProgress()
        session.error = None
        session.phase = ImportPhase.MAP

        logger.info(
            "import_file_loaded",
            session_id=session.id,
            filename=filename,
            headers=len(preview.headers),
            suggested=sorted(session.mapping)
        )

    @staticmethod
    def _require_phase(session: ImportSession, action: str, *allowed: ImportPhase) -> None:
        if session.phase not in allowed:
            raise InvalidImportPhaseError(
                action,
                session.phase.value,
                [p.value for p in allowed]
            )


# Singleton instance for convenience
_lead_import_service: Optional[LeadImportService] = None


def get_lead_import_service() -> LeadImportService:
    """Get or create LeadImportService wired to Supabase and settings."""
    global _lead_import_service
    if _lead_import_service is None:
        settings = get_settings()
        # Service role key bypasses row level security on bulk inserts
        client = get_admin_client() or get_supabase_client()
        _lead_import_service = LeadImportService(
            sink=SupabaseLeadSink(client, table=settings.leads_table),
            store=ImportSessionStore(ttl_minutes=settings.import_session_ttl_minutes),
            batch_size=settings.import_batch_size,
            batch_delay=settings.import_batch_delay_seconds,
            preview_rows=settings.import_preview_rows,
            enforce_required_fields=settings.import_enforce_required_fields,
        )
    return _lead_import_service
