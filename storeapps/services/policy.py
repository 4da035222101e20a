"""Failure handling policy for the import pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailurePolicy(str, Enum):
    """What the pipeline does when a stage fails."""

    FATAL = "fatal"
    CONTINUE_DEGRADED = "continue"


@dataclass(frozen=True)
class StagePolicies:
    """Failure policy per pipeline stage.

    Module loading is always fatal: nothing downstream works without the
    client. Import and connect failures abort by default; the tolerant
    variant keeps going with no records or no session.
    """

    module_load: FailurePolicy = FailurePolicy.FATAL
    import_records: FailurePolicy = FailurePolicy.FATAL
    connect: FailurePolicy = FailurePolicy.FATAL

    def __post_init__(self) -> None:
        if self.module_load is not FailurePolicy.FATAL:
            raise ValueError("module_load failures must be fatal")

    @classmethod
    def tolerant(cls) -> "StagePolicies":
        return cls(
            import_records=FailurePolicy.CONTINUE_DEGRADED,
            connect=FailurePolicy.CONTINUE_DEGRADED,
        )

    @classmethod
    def strict(cls) -> "StagePolicies":
        return cls()
