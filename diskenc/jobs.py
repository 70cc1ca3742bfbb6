# jobs.py - Per-device encrypt/decrypt job registry
"""
Owns the in-flight encrypt/decrypt jobs, one per (device, kind).

Jobs are created by the first progress tick for a key and evicted
synchronously by the terminal result for that key. Observers (progress
windows, tests) follow the registry through its Qt signals:

    job_started(DeviceJob)      first tick for a key
    progress_updated(DeviceJob) every accepted tick
    job_finished(DeviceJob)     terminal result or explicit close

Single owner: only the dispatcher's thread may call the mutating methods.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from diskenc.core.limits import Limits
from diskenc.core.modes import JobKind, JobState

_jobs_logger = logging.getLogger("DiskEnc.jobs")

JobKey = Tuple[str, JobKind]


def clamp_progress(value: float) -> float:
    """Clamp a reported percentage to [0, 100]."""
    return max(Limits.PROGRESS_MIN, min(Limits.PROGRESS_MAX, float(value)))


@dataclass
class DeviceJob:
    """One encrypt or decrypt job running on a device."""

    device: str
    name: str
    kind: JobKind
    progress: float = Limits.PROGRESS_MIN
    state: JobState = JobState.PENDING

    @property
    def key(self) -> JobKey:
        return self.device, self.kind

    @property
    def is_active(self) -> bool:
        return self.state == JobState.ACTIVE


class JobRegistry(QObject):
    """
    Registry of DeviceJobs keyed by (device path, kind).

    Usage:
        registry = JobRegistry()
        registry.job_started.connect(view.open)
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 12.5)
        registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)
    """

    job_started = pyqtSignal(object)
    progress_updated = pyqtSignal(object)
    job_finished = pyqtSignal(object)

    def __init__(
        self,
        stale_window: float = Limits.STALE_PROGRESS_WINDOW,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._jobs: Dict[JobKey, DeviceJob] = {}
        # key -> clock() at its last terminal result
        self._terminated: Dict[JobKey, float] = {}
        self._stale_window = stale_window
        self._clock = clock

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, device: str, kind: JobKind) -> Optional[DeviceJob]:
        return self._jobs.get((device, JobKind(kind)))

    def jobs(self) -> List[DeviceJob]:
        """Snapshot of the live jobs."""
        return list(self._jobs.values())

    def has_any_active_job(self) -> bool:
        """True while any encrypt or decrypt job is in flight."""
        return bool(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _is_stale(self, key: JobKey) -> bool:
        finished_at = self._terminated.get(key)
        if finished_at is None:
            return False
        if self._clock() - finished_at <= self._stale_window:
            return True
        del self._terminated[key]
        return False

    def on_progress(self, device: str, kind: JobKind, name: str, progress: float) -> Optional[DeviceJob]:
        """
        Record a progress tick, creating the job on the first tick.

        Returns:
            The updated job, or None if the tick was stale or not a finite
            number and was ignored
        """
        kind = JobKind(kind)
        key = (device, kind)

        if not math.isfinite(float(progress)):
            _jobs_logger.warning(f"Ignoring non-finite {kind.value} progress {progress} for {device}")
            return None

        job = self._jobs.get(key)
        if job is None:
            if self._is_stale(key):
                _jobs_logger.warning(f"Ignoring stale {kind.value} progress {progress} for {device}")
                return None
            job = DeviceJob(device=device, name=name, kind=kind)
            self._jobs[key] = job
            job.state = JobState.ACTIVE
            _jobs_logger.info(f"{kind.value} job started for {device} ({name})")
            self.job_started.emit(job)

        clamped = clamp_progress(progress)
        if clamped != progress:
            _jobs_logger.debug(f"Clamped {kind.value} progress {progress} -> {clamped} for {device}")
        job.progress = max(job.progress, clamped)
        self.progress_updated.emit(job)
        return job

    def on_terminal(self, device: str, kind: JobKind, code: int) -> Optional[DeviceJob]:
        """
        Evict the job for (device, kind) on its terminal result.

        Removal is a no-op when no job exists, e.g. the daemon failed
        before reporting any progress.

        Returns:
            The evicted job, or None
        """
        kind = JobKind(kind)
        key = (device, kind)
        self._terminated[key] = self._clock()

        job = self._jobs.pop(key, None)
        if job is None:
            _jobs_logger.info(f"{kind.value} result {code} for {device} without a tracked job")
            return None

        job.state = JobState.TERMINAL
        _jobs_logger.info(f"{kind.value} job for {device} finished with code {code}")
        self.job_finished.emit(job)
        return job

    def close(self, device: str, kind: JobKind) -> Optional[DeviceJob]:
        """
        Drop a job because its consumer closed it (e.g. the progress
        window was dismissed). A later tick for the key starts a new job.
        """
        job = self._jobs.pop((device, JobKind(kind)), None)
        if job is None:
            return None
        job.state = JobState.TERMINAL
        _jobs_logger.info(f"{job.kind.value} job for {device} closed by its consumer")
        self.job_finished.emit(job)
        return job

    def clear(self) -> None:
        """Close every job (used on teardown)."""
        for device, kind in list(self._jobs):
            self.close(device, kind)
        self._terminated.clear()
