"""FastAPI request/response intake: one synchronous workflow run per request."""

import os
import signal
import uuid
from collections.abc import Callable

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sga_worker.logging.logger import Log
from sga_worker.worker.job_runner import JobRunner
from sga_worker.worker.messages import epoch_ms, result_payload
from sga_worker.workflow.models import Job


class ScrapeRequest(BaseModel):
    numero_protocolo: str = Field(min_length=1)


def _terminate_process() -> None:
    # uvicorn turns SIGTERM into an orderly shutdown.
    os.kill(os.getpid(), signal.SIGTERM)


def _error_response(error: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, "timestamp": epoch_ms()},
    )


def create_app(
    job_runner: JobRunner,
    on_fatal: Callable[[], None] = _terminate_process,
) -> FastAPI:
    """Create the HTTP intake around a configured JobRunner."""
    app = FastAPI(title="SGA document worker")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    @app.post("/scrape")
    async def scrape(request: ScrapeRequest) -> JSONResponse:
        job = Job(job_id=uuid.uuid4().hex, protocol_number=request.numero_protocolo.strip())
        try:
            result = await job_runner.run(job)
        except Exception as exc:
            Log.exception(f"Job {job.job_id} crashed, shutting down")
            on_fatal()
            return _error_response(f"Internal error: {exc}")
        if not result.success:
            return _error_response(str(result.error))
        return JSONResponse(status_code=200, content=result_payload(result))

    return app
