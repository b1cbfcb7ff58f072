import asyncio
import sys

import uvicorn
from redis.asyncio import Redis

from sga_worker.api.app import create_app
from sga_worker.config.settings import Settings
from sga_worker.logging.logger import Log
from sga_worker.worker.job_runner import JobRunner
from sga_worker.worker.worker import Worker
from sga_worker.workflow.engine import build_engine


async def run_worker(job_runner: JobRunner, settings: Settings) -> int:
    """Run the Redis intake until stopped. Returns the process exit code."""
    redis = Redis.from_url(settings.redis_url)
    worker = Worker(redis, job_runner, settings)
    asyncio.get_running_loop().set_exception_handler(worker.handle_loop_exception)
    try:
        await worker.run()
    finally:
        await redis.aclose()
    if worker.fatal_error is not None:
        Log.error(f"Worker exited after a fatal error: {worker.fatal_error}")
        return 1
    return 0


def main() -> None:
    """Entry point: load settings -> build dependencies -> serve the configured intake."""
    settings = Settings()
    Log.configure(settings.log_level)

    job_runner = JobRunner(build_engine(settings), settings)
    mode = settings.intake_mode.lower()
    if mode == "http":
        Log.info(f"Serving HTTP intake on {settings.http_host}:{settings.http_port}")
        uvicorn.run(
            create_app(job_runner),
            host=settings.http_host,
            port=settings.http_port,
            log_level=settings.log_level.lower(),
        )
        return
    if mode != "redis":
        raise ValueError(f"Unknown intake mode '{mode}'. Choose from: ['http', 'redis']")

    try:
        exit_code = asyncio.run(run_worker(job_runner, settings))
    except KeyboardInterrupt:
        Log.info("Worker shutting down gracefully")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
