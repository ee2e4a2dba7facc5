"""Result types returned by sync operations."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Outcome(str, Enum):
    """How an operation ended."""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ProjectFailure(BaseModel):
    """A project that could not be synced during fan-out."""

    project: str
    reason: str


class FanOutReport(BaseModel):
    """Aggregate result of syncing the main location to every tracked project."""

    succeeded: int = 0
    failed: int = 0
    failures: list[ProjectFailure] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def record_success(self) -> None:
        self.succeeded += 1

    def record_failure(self, project: str, reason: str) -> None:
        self.failed += 1
        self.failures.append(ProjectFailure(project=project, reason=reason))


class OperationResult(BaseModel):
    """Outcome of ``init``, ``merge`` or ``sync``.

    Cancellation by the operator and technical failure are separate outcomes so
    callers can report them differently.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    outcome: Outcome
    message: str = ""
    error: Exception | None = None
    report: FanOutReport | None = None

    @classmethod
    def success(cls, message: str = "", report: FanOutReport | None = None) -> "OperationResult":
        return cls(outcome=Outcome.SUCCESS, message=message, report=report)

    @classmethod
    def cancelled(cls, message: str = "Operation cancelled by user") -> "OperationResult":
        return cls(outcome=Outcome.CANCELLED, message=message)

    @classmethod
    def failed(cls, error: Exception, message: str | None = None) -> "OperationResult":
        return cls(outcome=Outcome.FAILED, message=message or str(error), error=error)

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    @property
    def is_cancelled(self) -> bool:
        return self.outcome == Outcome.CANCELLED

    @property
    def is_failed(self) -> bool:
        return self.outcome == Outcome.FAILED
