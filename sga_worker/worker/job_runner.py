import shutil
import tempfile
from pathlib import Path

from sga_worker.config.settings import Settings
from sga_worker.logging.logger import Log
from sga_worker.workflow.engine import WorkflowEngine
from sga_worker.workflow.models import Job, JobResult


class JobRunner:
    """Run one job inside its own staging directory and clean up afterwards."""

    def __init__(self, engine: WorkflowEngine, settings: Settings) -> None:
        self._engine = engine
        self._settings = settings

    async def run(self, job: Job) -> JobResult:
        """Execute a single job. Job-scoped failures come back as a failed result."""
        staging_dir = self._create_staging_dir(job)
        Log.info(f"Running job {job.job_id} in {staging_dir}")
        try:
            return await self._engine.run(job, staging_dir)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)
            Log.debug(f"Removed staging directory {staging_dir}")

    def _create_staging_dir(self, job: Job) -> Path:
        root = Path(self._settings.download_root)
        root.mkdir(parents=True, exist_ok=True)
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in job.job_id)
        return Path(tempfile.mkdtemp(prefix=f"{safe_id}-", dir=root))
