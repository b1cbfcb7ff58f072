import base64
from dataclasses import dataclass
from enum import Enum


class WorkflowState(Enum):
    """Steps of a retrieval run, in the order they are reached."""

    INIT = "init"
    NAVIGATED = "navigated"
    SEARCHED = "searched"
    RESULT_SELECTED = "result_selected"
    CHALLENGE_PRESENTED = "challenge_presented"
    CHALLENGE_SOLVED = "challenge_solved"
    SUBMITTED = "submitted"
    DOWNLOADED = "downloaded"
    EXTRACTED = "extracted"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Job:
    """One retrieval request as delivered by an intake."""

    job_id: str
    protocol_number: str


@dataclass(frozen=True)
class ChallengeImage:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class RetrievedDocument:
    filename: str
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class JobFailure:
    """Structured failure reported for a job.

    `code` is the exception taxonomy name, `state` the last state the run
    reached before failing.
    """

    code: str
    message: str
    state: WorkflowState

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


@dataclass(frozen=True)
class JobResult:
    """Terminal outcome of a job. Produced exactly once per run."""

    success: bool
    extracted_text: str = ""
    error: JobFailure | None = None
    document_base64: str = ""

    @classmethod
    def succeeded(cls, extracted_text: str, document: RetrievedDocument) -> "JobResult":
        return cls(
            success=True,
            extracted_text=extracted_text,
            document_base64=base64.b64encode(document.data).decode("ascii"),
        )

    @classmethod
    def failed(cls, error: JobFailure) -> "JobResult":
        return cls(success=False, error=error)
