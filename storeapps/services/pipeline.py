"""Sequence one import run from module load to the last create call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TextIO

from storeapps.domain.models import ApplicationRecord
from storeapps.infrastructure.importers import RecordImportError, import_records
from storeapps.infrastructure.modules import (
    ManagementApi,
    ModuleLoadError,
    load_management_module,
)
from storeapps.infrastructure.observability import (
    LogConfig,
    RetentionReport,
    configure_logging,
    get_logger,
    prune_log_files,
)

from .policy import FailurePolicy
from .publisher import ApplicationPublisher, PublishSummary
from .session import SessionConnectError, connect_session

if TYPE_CHECKING:
    from storeapps.app.config import ImportSettings


class PipelineAbort(Exception):
    """Raised when a stage with a fatal failure policy fails."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause


@dataclass
class PipelineResult:
    """Structured result of an import run."""

    log_path: Path
    records: list[ApplicationRecord] = field(default_factory=list)
    summary: PublishSummary = field(default_factory=PublishSummary)
    retention: RetentionReport | None = None
    connected: bool = False
    degraded_stages: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.degraded_stages or self.summary.failed:
            return "partial"
        return "success"


class ImportPipeline:
    """Run the import stages strictly in order.

    The collaborators default to the real implementations and can be
    replaced for tests.
    """

    def __init__(
        self,
        settings: "ImportSettings",
        *,
        console: TextIO | None = None,
        clock: Callable[[], datetime] = datetime.now,
        loader: Callable[[Path], ManagementApi] = load_management_module,
        importer: Callable[..., list[ApplicationRecord]] = import_records,
        connector: Callable[..., Any] = connect_session,
        pruner: Callable[..., RetentionReport] = prune_log_files,
    ) -> None:
        self.settings = settings
        self._console = console
        self._clock = clock
        self._loader = loader
        self._importer = importer
        self._connector = connector
        self._pruner = pruner
        self._logger = get_logger(__name__)

    def _handle_failure(
        self, stage: str, policy: FailurePolicy, exc: Exception, result: PipelineResult
    ) -> None:
        self._logger.error("%s failed: %s", stage, exc)
        if policy is FailurePolicy.FATAL:
            self._logger.error("Aborting: %s failures are fatal", stage)
            raise PipelineAbort(stage, exc) from exc
        self._logger.warning("Continuing without %s result", stage)
        result.degraded_stages.append(stage)

    def run(self) -> PipelineResult:
        """Execute the run.

        Raises:
            PipelineAbort: If a stage configured as fatal fails.
        """
        settings = self.settings
        started = self._clock()
        log_config = LogConfig(base_path=settings.log_path, run_timestamp=started)
        log_path = configure_logging(log_config, console=self._console)
        result = PipelineResult(log_path=log_path)
        self._logger.info("Starting Android store app import from %s", settings.csv_location)
        if settings.dry_run:
            self._logger.info("Dry run enabled; no applications will be created")

        try:
            api = self._loader(settings.module_path)
        except ModuleLoadError as exc:
            self._handle_failure(
                "module load", settings.policies.module_load, exc, result
            )
            raise  # module load is never degraded

        result.retention = self._pruner(
            log_config.directory,
            settings.max_age_log_files,
            now=started,
            keep=[log_path],
        )

        try:
            result.records = self._importer(
                settings.csv_location, settings.csv_delimiter
            )
        except RecordImportError as exc:
            self._handle_failure(
                "record import", settings.policies.import_records, exc, result
            )

        session = None
        if not settings.dry_run:
            try:
                session = self._connector(api, settings.connection)
                result.connected = True
            except SessionConnectError as exc:
                self._handle_failure(
                    "tenant connection", settings.policies.connect, exc, result
                )

        publisher = ApplicationPublisher(api, session, dry_run=settings.dry_run)
        result.summary = publisher.publish_all(result.records)

        self._logger.info(
            "Import finished with status %s: %d record(s), %d created, %d failed",
            result.status,
            len(result.records),
            result.summary.created,
            result.summary.failed,
        )
        return result


__all__ = ["ImportPipeline", "PipelineAbort", "PipelineResult"]
