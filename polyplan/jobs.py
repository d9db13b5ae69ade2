"""
Job queue — run planning requests in the background.

A plan over tens of hectares can take longer than an HTTP client is
willing to wait, so the web server hands such requests to a JobQueue and
returns a job id the client polls.

Jobs live in memory only and move through

    pending → processing → completed | failed

Finished jobs are dropped once they are older than the retention period
(one hour by default).  The queue is an explicit object; the web app
keeps one on ``app.state``.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from polyplan.pipeline.land import PlanningInputError, PlanningRequest
from polyplan.pipeline.placer import planning_result_to_dict
from polyplan.pipeline.planning import plan_layout


log = logging.getLogger(__name__)

JOB_RETENTION_S = 3600.0


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    id: str
    status: JobStatus = JobStatus.PENDING
    progress: int = 0                     # 0-100
    result: dict | None = None            # serialized PlanningResult
    error: str | None = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def to_dict(self, include_result: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "job_id": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "error": self.error,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_result:
            data["result"] = self.result
        return data


class JobQueue:
    """In-memory job store backed by a thread pool.

    Usage:
        queue = JobQueue()
        job = queue.submit(request)
        queue.get(job.id).status     # poll
        queue.shutdown()
    """

    def __init__(
        self,
        max_workers: int = 2,
        retention_s: float = JOB_RETENTION_S,
        *,
        planner: Callable[..., Any] = plan_layout,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.retention_s = retention_s
        self._planner = planner
        self._clock = clock
        self._jobs: dict[str, Job] = {}
        self._futures: dict[str, Future] = {}
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="polyplan-job")

    # ── Store ──────────────────────────────────────────────────────

    def create(self) -> Job:
        now = self._clock()
        job = Job(id=uuid.uuid4().hex, created_at=now, updated_at=now)
        with self._lock:
            self._jobs[job.id] = job
        self.cleanup()
        return job

    def update(self, job_id: str, **changes: Any) -> Job | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            for name, value in changes.items():
                setattr(job, name, value)
            job.updated_at = self._clock()
            return job

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> list[Job]:
        with self._lock:
            return sorted(self._jobs.values(), key=lambda j: j.created_at)

    def cleanup(self) -> int:
        """Drop finished jobs older than the retention period."""
        cutoff = self._clock() - self.retention_s
        with self._lock:
            stale = [jid for jid, job in self._jobs.items()
                     if job.finished and job.updated_at < cutoff]
            for jid in stale:
                del self._jobs[jid]
                self._futures.pop(jid, None)
        if stale:
            log.info("Cleaned up %d expired job(s)", len(stale))
        return len(stale)

    # ── Execution ──────────────────────────────────────────────────

    def submit(self, request: PlanningRequest) -> Job:
        """Queue a planning request; returns the pending job."""
        job = self.create()
        future = self._executor.submit(self._run, job.id, request)
        with self._lock:
            self._futures[job.id] = future
        log.info("Queued job %s", job.id)
        return job

    def wait(self, job_id: str, timeout: float | None = None) -> Job | None:
        """Block until a job finishes (used by the CLI and tests)."""
        with self._lock:
            future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.get(job_id)

    def _run(self, job_id: str, request: PlanningRequest) -> None:
        self.update(job_id, status=JobStatus.PROCESSING, progress=0)

        def progress(fraction: float) -> None:
            self.update(job_id, progress=int(fraction * 100))

        try:
            result = self._planner(request.land, request.config, request.exclusions,
                                   progress=progress)
        except PlanningInputError as exc:
            log.info("Job %s rejected: %s", job_id, exc)
            self.update(job_id, status=JobStatus.FAILED, error=str(exc))
            return
        except Exception as exc:
            log.exception("Job %s failed", job_id)
            self.update(job_id, status=JobStatus.FAILED, error=f"{type(exc).__name__}: {exc}")
            return

        self.update(job_id, status=JobStatus.COMPLETED, progress=100,
                    result=planning_result_to_dict(result))
        log.info("Job %s completed", job_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
