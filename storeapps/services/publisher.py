"""Create one managed Android store app per imported record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from storeapps.domain.models import AndroidStoreApp, ApplicationRecord
from storeapps.infrastructure.modules import ManagementApi
from storeapps.infrastructure.observability import (
    get_logger,
    log_context,
    log_exception,
)


@dataclass
class PublishOutcome:
    """Result of publishing a single record."""

    index: int
    name: str
    status: str
    app_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in ("created", "validated")


@dataclass
class PublishSummary:
    """Outcomes of a publish run, in record order."""

    outcomes: list[PublishOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def created(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == "created")

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == "failed")

    @property
    def errors(self) -> list[str]:
        return [
            f"record {o.index} ({o.name}): {o.error}"
            for o in self.outcomes
            if o.status == "failed"
        ]


class ApplicationPublisher:
    """Issue a create call per record, isolating failures to their record."""

    def __init__(
        self,
        api: ManagementApi,
        session: Any,
        *,
        dry_run: bool = False,
    ) -> None:
        self._api = api
        self._session = session
        self._dry_run = dry_run
        self._logger = get_logger(__name__)

    def publish_all(self, records: Iterable[ApplicationRecord]) -> PublishSummary:
        summary = PublishSummary()
        for index, record in enumerate(records, start=1):
            with log_context(row=index, app=record.name):
                summary.outcomes.append(self.publish(index, record))
        self._logger.info(
            "Publishing finished: %d attempted, %d created, %d failed",
            summary.attempted,
            summary.created,
            summary.failed,
        )
        return summary

    def publish(self, index: int, record: ApplicationRecord) -> PublishOutcome:
        """Publish one record; never raises."""
        try:
            request = AndroidStoreApp.from_record(record)
            if self._dry_run:
                self._logger.info(
                    "Dry run: would create %s (minimum %s, icon %s)",
                    request.display_name,
                    request.minimum_version.value,
                    request.large_icon.mime_type,
                )
                return PublishOutcome(index=index, name=record.name, status="validated")
            if self._session is None:
                raise RuntimeError("no authenticated session")
            self._logger.info("Creating Android store app %s", request.display_name)
            created = self._api.create_android_store_app(
                self._session, request.to_payload()
            )
        except Exception as exc:
            log_exception(self._logger, f"Creation failed for record {index}", exc)
            return PublishOutcome(
                index=index, name=record.name, status="failed", error=str(exc)
            )

        app_id = None
        if isinstance(created, dict):
            app_id = created.get("id")
        self._logger.info(
            "Created Android store app %s%s",
            record.name,
            f" (id {app_id})" if app_id else "",
        )
        return PublishOutcome(
            index=index, name=record.name, status="created", app_id=app_id
        )


__all__ = ["ApplicationPublisher", "PublishOutcome", "PublishSummary"]
