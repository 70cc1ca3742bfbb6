#!/usr/bin/env python3
"""
Tests for jobs.py - per-device job registry.

Verifies:
- Job creation on first progress, eviction on terminal result
- Progress clamping and monotonicity
- Stale progress after a terminal result is ignored
- At most one job per (device, kind) under random interleavings
"""

import random

import pytest

from diskenc.core.modes import JobKind, JobState
from diskenc.jobs import DeviceJob, JobRegistry, clamp_progress


@pytest.fixture
def registry(clock):
    return JobRegistry(stale_window=2.0, clock=clock)


class Recorder:
    """Collects (event, job key, progress) from the registry signals."""

    def __init__(self, registry):
        self.events = []
        registry.job_started.connect(lambda job: self.events.append(("started", job.key, job.progress)))
        registry.progress_updated.connect(lambda job: self.events.append(("progress", job.key, job.progress)))
        registry.job_finished.connect(lambda job: self.events.append(("finished", job.key, job.progress)))


class TestClampProgress:
    @pytest.mark.parametrize(
        "value,expected",
        [(-5.0, 0.0), (0.0, 0.0), (42.5, 42.5), (100.0, 100.0), (250.0, 100.0)],
    )
    def test_clamp(self, value, expected):
        assert clamp_progress(value) == expected


class TestLifecycle:
    def test_encrypt_scenario(self, registry):
        """Progress 0 -> 50 then success: created, observed, removed."""
        rec = Recorder(registry)

        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 0.0)
        job = registry.get("/dev/sda1", JobKind.ENCRYPT)
        assert job is not None
        assert job.state == JobState.ACTIVE
        assert registry.has_any_active_job()

        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 50.0)
        assert job.progress == 50.0

        evicted = registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)
        assert evicted is job
        assert job.state == JobState.TERMINAL
        assert registry.get("/dev/sda1", JobKind.ENCRYPT) is None
        assert not registry.has_any_active_job()

        key = ("/dev/sda1", JobKind.ENCRYPT)
        assert rec.events == [
            ("started", key, 0.0),
            ("progress", key, 0.0),
            ("progress", key, 50.0),
            ("finished", key, 50.0),
        ]

    def test_job_started_emitted_once(self, registry):
        rec = Recorder(registry)
        for p in (1.0, 2.0, 3.0):
            registry.on_progress("/dev/sdb", JobKind.DECRYPT, "sdb", p)
        assert [e[0] for e in rec.events].count("started") == 1
        assert len(registry) == 1

    def test_encrypt_and_decrypt_are_separate_keys(self, registry):
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 10.0)
        registry.on_progress("/dev/sda1", JobKind.DECRYPT, "sda1", 20.0)
        assert len(registry) == 2

        registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)
        assert registry.get("/dev/sda1", JobKind.ENCRYPT) is None
        assert registry.get("/dev/sda1", JobKind.DECRYPT).progress == 20.0

    def test_terminal_without_job_is_noop(self, registry):
        rec = Recorder(registry)
        assert registry.on_terminal("/dev/sdc", JobKind.ENCRYPT, -5) is None
        assert registry.on_terminal("/dev/sdc", JobKind.ENCRYPT, -5) is None
        assert rec.events == []
        assert not registry.has_any_active_job()

    def test_close_removes_job_without_tombstone(self, registry):
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 30.0)
        closed = registry.close("/dev/sda1", JobKind.ENCRYPT)
        assert closed.state == JobState.TERMINAL
        assert registry.get("/dev/sda1", JobKind.ENCRYPT) is None

        # Next tick re-creates the job immediately
        job = registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 31.0)
        assert job is not None
        assert job.progress == 31.0

    def test_close_unknown_job(self, registry):
        assert registry.close("/dev/none", JobKind.DECRYPT) is None

    def test_clear(self, registry):
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 1.0)
        registry.on_progress("/dev/sdb1", JobKind.DECRYPT, "sdb1", 1.0)
        registry.clear()
        assert registry.jobs() == []

    def test_accepts_kind_values(self, registry):
        registry.on_progress("/dev/sda1", "encrypt", "sda1", 5.0)
        assert registry.get("/dev/sda1", JobKind.ENCRYPT) is not None


class TestProgress:
    def test_out_of_range_values_are_clamped(self, registry):
        job = registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", -20.0)
        assert job.progress == 0.0
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 180.0)
        assert job.progress == 100.0

    def test_progress_never_decreases(self, registry):
        job = registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 60.0)
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 40.0)
        assert job.progress == 60.0

    def test_stale_progress_after_terminal_is_ignored(self, registry, clock):
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 99.0)
        registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)

        clock.advance(0.5)
        assert registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 100.0) is None
        assert not registry.has_any_active_job()

    def test_progress_after_stale_window_starts_new_job(self, registry, clock):
        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 99.0)
        registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)

        clock.advance(5.0)
        job = registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 1.0)
        assert job is not None
        assert job.progress == 1.0

    def test_stale_guard_is_per_key(self, registry):
        registry.on_terminal("/dev/sda1", JobKind.ENCRYPT, 0)
        assert registry.on_progress("/dev/sda1", JobKind.DECRYPT, "sda1", 1.0) is not None
        assert registry.on_progress("/dev/sdb1", JobKind.ENCRYPT, "sdb1", 1.0) is not None


class TestInvariants:
    """Randomized interleavings of progress and terminal notifications."""

    DEVICES = ["/dev/sda1", "/dev/sda2", "/dev/nvme0n1p3"]

    @pytest.mark.parametrize("seed", range(10))
    def test_at_most_one_job_per_key(self, seed, clock):
        rng = random.Random(seed)
        registry = JobRegistry(stale_window=1.0, clock=clock)
        live = {}

        started = []
        registry.job_started.connect(started.append)

        for _ in range(500):
            device = rng.choice(self.DEVICES)
            kind = rng.choice(list(JobKind))
            clock.advance(rng.uniform(0.0, 0.8))

            if rng.random() < 0.75:
                job = registry.on_progress(device, kind, device[5:], rng.uniform(-10.0, 110.0))
                if job is not None:
                    assert 0.0 <= job.progress <= 100.0
                    live[(device, kind)] = job
            else:
                registry.on_terminal(device, kind, rng.choice([0, -1, -2, -12]))
                live.pop((device, kind), None)
                assert registry.get(device, kind) is None

            keys = [job.key for job in registry.jobs()]
            assert len(keys) == len(set(keys))
            assert len(keys) <= len(self.DEVICES) * len(JobKind)
            for key, job in live.items():
                assert registry.get(*key) is job

        assert all(isinstance(job, DeviceJob) for job in started)


class TestNonFiniteProgress:
    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_tick_is_ignored(self, registry, bad):
        job = registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 10.0)
        assert registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", bad) is None
        assert job.progress == 10.0

        registry.on_progress("/dev/sda1", JobKind.ENCRYPT, "sda1", 20.0)
        assert job.progress == 20.0

    def test_non_finite_first_tick_creates_no_job(self, registry):
        rec = Recorder(registry)
        assert registry.on_progress("/dev/sda1", JobKind.DECRYPT, "sda1", float("nan")) is None
        assert len(registry) == 0
        assert rec.events == []
