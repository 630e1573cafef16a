"""
Background conversion jobs.

A ConversionJob runs one `convert` call as an asyncio task and exposes the
driver surface clients poll: submit, cancel, progress, error, completion.
"""
import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, Optional, Sequence

from app.core.callbacks import notify
from app.core.config import ConverterConfig
from app.core.errors import ConversionCanceled, ConversionError
from app.services.alignment import FastaArtifact
from app.services.vcf.line_source import CancellationToken

from .conversion_pipeline import convert

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


TERMINAL_STATUSES = {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELED}


class ConversionJob:
    def __init__(
        self,
        sample_names: Sequence[str],
        total_size: Optional[int],
        *,
        job_id: Optional[str] = None,
        config: Optional[ConverterConfig] = None,
        on_progress: Optional[Callable[[float], Any]] = None,
        on_error: Optional[Callable[[str], Any]] = None,
        on_complete: Optional[Callable[[FastaArtifact], Any]] = None,
    ):
        self.job_id = job_id or uuid.uuid4().hex
        self.sample_names = list(sample_names)
        self.total_size = total_size
        self.config = config
        self.on_progress = on_progress
        self.on_error = on_error
        self.on_complete = on_complete

        self.status = JobStatus.PENDING
        self.progress = 0.0
        self.error: Optional[str] = None
        self.artifact: Optional[FastaArtifact] = None
        self.created_at = time.time()
        self.finished_at: Optional[float] = None

        self.cancel_token = CancellationToken()
        self._task: Optional[asyncio.Task] = None

    @property
    def done(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def submit(self, chunks: AsyncIterator[bytes]) -> asyncio.Task:
        """Start the conversion on the running event loop."""
        if self._task is not None:
            raise RuntimeError(f"Job {self.job_id} was already submitted")
        self.status = JobStatus.RUNNING
        self._task = asyncio.create_task(self._run(chunks))
        logger.info("Submitted conversion job %s for %d sample(s)", self.job_id, len(self.sample_names))
        return self._task

    def cancel(self) -> bool:
        """Signal cancellation; returns False if the job already finished."""
        if self.done:
            return False
        self.cancel_token.cancel()
        logger.info("Cancellation requested for job %s", self.job_id)
        return True

    async def wait(self) -> Optional[FastaArtifact]:
        if self._task is None:
            raise RuntimeError(f"Job {self.job_id} was never submitted")
        return await self._task

    async def _handle_progress(self, fraction: float) -> None:
        self.progress = fraction
        await notify(self.on_progress, fraction)

    async def _fail(self, status: JobStatus, message: str) -> None:
        self.status = status
        self.error = message
        self.finished_at = time.time()
        await notify(self.on_error, message)

    async def _run(self, chunks: AsyncIterator[bytes]) -> Optional[FastaArtifact]:
        try:
            artifact = await convert(
                chunks,
                self.total_size,
                self.sample_names,
                on_progress=self._handle_progress,
                cancel_token=self.cancel_token,
                config=self.config,
            )
        except ConversionCanceled as e:
            logger.info("Job %s canceled", self.job_id)
            await self._fail(JobStatus.CANCELED, str(e))
            return None
        except ConversionError as e:
            logger.warning("Job %s failed: %s", self.job_id, str(e))
            await self._fail(JobStatus.FAILED, str(e))
            return None
        except Exception as e:
            logger.exception("Unexpected error in conversion job %s", self.job_id)
            await self._fail(JobStatus.FAILED, f"Internal error: {e}")
            return None

        self.artifact = artifact
        self.progress = 1.0
        self.status = JobStatus.COMPLETED
        self.finished_at = time.time()
        await notify(self.on_complete, artifact)
        return artifact

    def snapshot(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "progress": self.progress,
            "total_size": self.total_size,
            "sample_names": list(self.sample_names),
            "error": self.error,
            "sequence_length": self.artifact.sequence_length if self.artifact else None,
        }


class JobStore:
    """In-process registry of conversion jobs."""

    def __init__(self) -> None:
        self._jobs: Dict[str, ConversionJob] = {}

    def create(self, sample_names: Sequence[str], total_size: Optional[int], **kwargs: Any) -> ConversionJob:
        job = ConversionJob(sample_names, total_size, **kwargs)
        self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> Optional[ConversionJob]:
        return self._jobs.get(job_id)

    def cancel(self, job_id: str) -> Optional[ConversionJob]:
        job = self._jobs.get(job_id)
        if job is not None:
            job.cancel()
        return job

    def remove(self, job_id: str) -> Optional[ConversionJob]:
        job = self.cancel(job_id)
        self._jobs.pop(job_id, None)
        return job

    def __len__(self) -> int:
        return len(self._jobs)


# Global store for background conversions (polled by clients)
JOB_STORE = JobStore()
