import asyncio
from dataclasses import dataclass
from pathlib import Path

from sga_worker.browser.navigator import Navigator
from sga_worker.browser.session import Session
from sga_worker.config.settings import Settings
from sga_worker.download.capture import DownloadCapture
from sga_worker.exceptions import InferenceError, JobDeadlineExceeded, JobError
from sga_worker.inference.challenge_solver import ChallengeSolver
from sga_worker.inference.document_interpreter import DocumentInterpreter
from sga_worker.inference.factory import InferenceClientFactory
from sga_worker.logging.logger import Log
from sga_worker.workflow.challenge import decode_challenge_image, sanitize_challenge_text
from sga_worker.workflow.models import (
    ChallengeImage,
    Job,
    JobFailure,
    JobResult,
    RetrievedDocument,
    WorkflowState,
)
from sga_worker.workflow.portal import PortalLayout


@dataclass(slots=True)
class WorkflowRun:
    """Live state of one job while it moves through the portal."""

    job: Job
    state: WorkflowState = WorkflowState.INIT

    def advance(self, state: WorkflowState) -> None:
        Log.info(f"Job {self.job.job_id}: {self.state.value} -> {state.value}")
        self.state = state


class WorkflowEngine:
    """Drives one job through the portal and returns its single JobResult.

    Flow: open portal -> search -> select result -> read challenge -> solve
    -> submit and capture download -> interpret document.

    Every JobError raised along the way becomes a failed result once the
    browser session has been closed. Any other exception is a defect and
    propagates to the caller, still after the session is closed.
    """

    def __init__(
        self,
        *,
        navigator: Navigator,
        capture: DownloadCapture,
        solver: ChallengeSolver,
        interpreter: DocumentInterpreter,
        layout: PortalLayout | None = None,
        download_timeout_seconds: float = 30.0,
        job_deadline_seconds: float = 600.0,
    ) -> None:
        self._navigator = navigator
        self._capture = capture
        self._solver = solver
        self._interpreter = interpreter
        self._layout = layout or PortalLayout()
        self._download_timeout = download_timeout_seconds
        self._job_deadline = job_deadline_seconds

    async def run(self, job: Job, staging_dir: Path) -> JobResult:
        """Execute the full workflow for a job using `staging_dir` for downloads."""
        run = WorkflowRun(job)
        Log.info(f"Job {job.job_id}: retrieving protocol {job.protocol_number}")
        try:
            result = await asyncio.wait_for(
                self._execute(run, staging_dir), timeout=self._job_deadline
            )
        except JobError as exc:
            return self._fail(run, exc)
        except asyncio.TimeoutError:
            return self._fail(
                run, JobDeadlineExceeded(f"Run exceeded {self._job_deadline}s")
            )
        Log.info(f"Job {job.job_id} completed with {len(result.extracted_text)} chars")
        return result

    async def _execute(self, run: WorkflowRun, staging_dir: Path) -> JobResult:
        async with self._navigator.session(staging_dir) as session:
            await self._open_portal(run, session)
            await self._search(run, session)
            await self._select_result(run, session)
            image = await self._present_challenge(run, session)
            await self._solve_challenge(run, session, image)
            document = await self._submit_and_capture(run, session, staging_dir)
            text = await self._interpret(run, document)
            run.advance(WorkflowState.DONE)
            return JobResult.succeeded(text, document)

    async def _open_portal(self, run: WorkflowRun, session: Session) -> None:
        await self._navigator.navigate(session, self._layout.search_url)
        run.advance(WorkflowState.NAVIGATED)

    async def _search(self, run: WorkflowRun, session: Session) -> None:
        layout = self._layout
        await self._navigator.wait_for(session, layout.protocol_input)
        await self._navigator.type_text(session, layout.protocol_input, run.job.protocol_number)
        await self._navigator.click(session, layout.search_button)
        run.advance(WorkflowState.SEARCHED)

    async def _select_result(self, run: WorkflowRun, session: Session) -> None:
        # An empty result grid looks the same as a slow one: both time out here.
        await self._navigator.wait_for(session, self._layout.result_link)
        await self._navigator.click(session, self._layout.result_link)
        run.advance(WorkflowState.RESULT_SELECTED)

    async def _present_challenge(self, run: WorkflowRun, session: Session) -> ChallengeImage:
        layout = self._layout
        await self._navigator.wait_for(session, layout.document_request_button)
        await self._navigator.click(session, layout.document_request_button)
        await self._navigator.wait_for(session, layout.challenge_image)
        src = await self._navigator.read_attribute(
            session, layout.challenge_image, layout.challenge_image_attribute
        )
        image = decode_challenge_image(src)
        run.advance(WorkflowState.CHALLENGE_PRESENTED)
        return image

    async def _solve_challenge(
        self, run: WorkflowRun, session: Session, image: ChallengeImage
    ) -> None:
        answer = await self._solver.solve(image.data, image.mime_type)
        sanitized = sanitize_challenge_text(answer)
        if not sanitized:
            raise InferenceError(f"Challenge answer has no alphanumeric characters: {answer!r}")
        await self._navigator.type_text(session, self._layout.challenge_answer_input, sanitized)
        run.advance(WorkflowState.CHALLENGE_SOLVED)

    async def _submit_and_capture(
        self, run: WorkflowRun, session: Session, staging_dir: Path
    ) -> RetrievedDocument:
        capture = asyncio.create_task(
            self._capture.capture(session, staging_dir, self._download_timeout)
        )
        try:
            await self._navigator.click_by_label(
                session, self._layout.submit_tag, self._layout.submit_label
            )
        except BaseException:
            capture.cancel()
            await asyncio.gather(capture, return_exceptions=True)
            raise
        run.advance(WorkflowState.SUBMITTED)
        document = await capture
        run.advance(WorkflowState.DOWNLOADED)
        return document

    async def _interpret(self, run: WorkflowRun, document: RetrievedDocument) -> str:
        text = await self._interpreter.extract(document.data, document.mime_type)
        run.advance(WorkflowState.EXTRACTED)
        return text

    @staticmethod
    def _fail(run: WorkflowRun, exc: JobError) -> JobResult:
        failure = JobFailure(code=exc.code, message=str(exc), state=run.state)
        run.advance(WorkflowState.FAILED)
        Log.error(f"Job {run.job.job_id} failed at {failure.state.value}: {failure}")
        return JobResult.failed(failure)


def build_engine(settings: Settings) -> WorkflowEngine:
    """Build a WorkflowEngine with all required adapters."""
    navigator = Navigator(
        headless=settings.browser_headless,
        executable_path=settings.browser_executable_path,
        navigation_timeout_seconds=settings.navigation_timeout_seconds,
        element_timeout_seconds=settings.element_timeout_seconds,
    )
    capture = DownloadCapture(settle_delay_seconds=settings.download_settle_seconds)
    solver, interpreter = InferenceClientFactory.create_adapters(settings)
    return WorkflowEngine(
        navigator=navigator,
        capture=capture,
        solver=solver,
        interpreter=interpreter,
        layout=PortalLayout(search_url=settings.portal_url),
        download_timeout_seconds=settings.download_timeout_seconds,
        job_deadline_seconds=settings.job_deadline_seconds,
    )
