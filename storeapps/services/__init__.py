"""Service layer modules for storeapps."""

from .pipeline import ImportPipeline, PipelineAbort, PipelineResult
from .policy import FailurePolicy, StagePolicies
from .publisher import ApplicationPublisher, PublishOutcome, PublishSummary
from .session import SessionConnectError, connect_session

__all__ = [
    "ApplicationPublisher",
    "FailurePolicy",
    "ImportPipeline",
    "PipelineAbort",
    "PipelineResult",
    "PublishOutcome",
    "PublishSummary",
    "SessionConnectError",
    "StagePolicies",
    "connect_session",
]
