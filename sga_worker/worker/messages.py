"""Wire shapes shared by the Redis and HTTP intakes."""

import time

from pydantic import BaseModel, ConfigDict, Field

from sga_worker.workflow.models import Job, JobResult


class JobMessage(BaseModel):
    """Job request published on the job channel: `{job_id, protocol}`."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    job_id: str = Field(min_length=1)
    protocol: str = Field(min_length=1)

    def to_job(self) -> Job:
        return Job(job_id=self.job_id, protocol_number=self.protocol.strip())


def epoch_ms() -> int:
    return int(time.time() * 1000)


def result_payload(result: JobResult) -> dict[str, object]:
    """Body stored under the result key and returned by POST /scrape."""
    return {
        "success": True,
        "data": {
            "pdfBase64": result.document_base64,
            "condicionamento": result.extracted_text,
        },
    }


def completion_message(job_id: str, result: JobResult) -> dict[str, object]:
    message: dict[str, object] = {
        "job_id": job_id,
        "status": "completed" if result.success else "failed",
    }
    if result.error is not None:
        message["error"] = str(result.error)
    message["timestamp"] = epoch_ms()
    return message


def failure_message(job_id: str, error: str) -> dict[str, object]:
    return {
        "job_id": job_id,
        "status": "failed",
        "error": error,
        "timestamp": epoch_ms(),
    }
