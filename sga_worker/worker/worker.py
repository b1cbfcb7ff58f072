import asyncio
import json
from typing import Any

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from sga_worker.config.settings import Settings
from sga_worker.logging.logger import Log
from sga_worker.worker.job_runner import JobRunner
from sga_worker.worker.messages import (
    JobMessage,
    completion_message,
    failure_message,
    result_payload,
)
from sga_worker.workflow.models import Job, JobResult


class Worker:
    """Subscribe loop: receive -> dispatch -> report.

    Jobs run as independent tasks, at most `max_concurrent_jobs` at a time.
    An exception escaping a job is treated as a defect: the job is reported
    as failed, the loop stops taking messages and `fatal_error` is set so
    the process can exit non-zero once in-flight jobs have finished.
    """

    def __init__(
        self,
        redis: Redis,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._redis = redis
        self._job_runner = job_runner
        self._settings = settings
        self._slots = asyncio.Semaphore(settings.max_concurrent_jobs)
        self._tasks: set[asyncio.Task[None]] = set()
        self._stopping = asyncio.Event()
        self.fatal_error: BaseException | None = None

    async def run(self, max_jobs: int | None = None) -> None:
        """Main receive loop. Runs until stopped.

        If max_jobs is set, stop after dispatching that many jobs (for testing).
        """
        channel = self._settings.job_channel
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        Log.info(f"Worker subscribed to '{channel}'")
        jobs_started = 0
        try:
            while not self._stopping.is_set():
                if max_jobs is not None and jobs_started >= max_jobs:
                    break
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self._settings.message_poll_interval_seconds,
                )
                if message is None:
                    continue
                job = self._parse_message(message)
                if job is None:
                    continue
                await self._slots.acquire()
                # A crash may have stopped the worker while this message waited for a slot.
                if self._stopping.is_set():
                    self._slots.release()
                    Log.warning(f"Worker stopping, job {job.job_id} not started")
                    break
                self._dispatch(job)
                jobs_started += 1
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            await self.drain()
            Log.info("Worker stopped")

    def stop(self) -> None:
        self._stopping.set()

    async def drain(self) -> None:
        """Wait for every in-flight job to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        """Event loop exception handler: any unhandled error stops the worker."""
        exc = context.get("exception")
        Log.error(f"Unhandled error in event loop: {context.get('message')}: {exc}")
        self.fatal_error = exc or RuntimeError(str(context.get("message")))
        self.stop()

    @staticmethod
    def _parse_message(message: dict[str, Any]) -> Job | None:
        try:
            return JobMessage.model_validate_json(message["data"]).to_job()
        except (ValidationError, KeyError) as exc:
            Log.warning(f"Ignoring invalid job message {message.get('data')!r}: {exc}")
            return None

    def _dispatch(self, job: Job) -> None:
        task = asyncio.create_task(self._process(job), name=f"job-{job.job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _process(self, job: Job) -> None:
        try:
            result = await self._job_runner.run(job)
        except Exception as exc:
            Log.exception(f"Job {job.job_id} crashed, shutting down worker")
            self.fatal_error = exc
            self.stop()
            await self._publish(failure_message(job.job_id, f"Internal error: {exc}"))
            return
        finally:
            self._slots.release()
        await self._report(job, result)

    async def _report(self, job: Job, result: JobResult) -> None:
        if result.success:
            key = f"{self._settings.result_key_prefix}{job.job_id}"
            try:
                await self._redis.set(key, json.dumps(result_payload(result)))
            except RedisError as exc:
                Log.error(f"Could not store result for job {job.job_id}: {exc}")
                await self._publish(
                    failure_message(job.job_id, f"Result could not be stored: {exc}")
                )
                return
            Log.info(f"Stored result for job {job.job_id} under {key}")
        await self._publish(completion_message(job.job_id, result))

    async def _publish(self, message: dict[str, object]) -> None:
        try:
            await self._redis.publish(self._settings.completion_channel, json.dumps(message))
        except RedisError as exc:
            Log.error(f"Could not publish completion for job {message['job_id']}: {exc}")
