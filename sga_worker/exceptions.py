from typing import ClassVar


class JobError(Exception):
    """Base exception for failures scoped to a single job.

    Every subclass is caught at the workflow boundary and converted into a
    failed JobResult; none of them stop the process.
    """

    code: ClassVar[str] = "JobError"


class SessionError(JobError):
    """Raised when the browser session cannot be created or operated."""

    code = "SessionError"


class NavigationTimeout(JobError):
    """Raised when a page does not reach network idle within its timeout."""

    code = "NavigationTimeout"


class ElementNotFound(JobError):
    """Raised when a selector does not resolve within its timeout."""

    code = "ElementNotFound"


class DownloadTimeout(JobError):
    """Raised when no downloaded file shows up before the capture deadline."""

    code = "DownloadTimeout"


class InferenceError(JobError):
    """Raised when an inference call fails or returns an unusable answer."""

    code = "InferenceError"


class InferenceNetworkError(InferenceError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class JobDeadlineExceeded(JobError):
    """Raised when the whole run exceeds the job-level deadline."""

    code = "JobDeadlineExceeded"
