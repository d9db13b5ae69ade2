"""Tests for the background job queue."""

from __future__ import annotations

import threading
import unittest

from polyplan.jobs import JobQueue, JobStatus
from polyplan.pipeline.land import PlanningInputError, parse_plan_request
from tests.land_fixture import request_dict


class _Clock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _request():
    return parse_plan_request(request_dict(40, 30, {"max_side_length": 24, "strategy": "uniform"}))


class TestJobLifecycle(unittest.TestCase):

    def setUp(self):
        self.queue = JobQueue(max_workers=1)

    def tearDown(self):
        self.queue.shutdown()

    def test_completes_with_result(self):
        job = self.queue.submit(_request())
        self.assertIn(job.status, (JobStatus.PENDING, JobStatus.PROCESSING, JobStatus.COMPLETED))
        done = self.queue.wait(job.id, timeout=60)
        self.assertEqual(done.status, JobStatus.COMPLETED)
        self.assertEqual(done.progress, 100)
        self.assertIsNone(done.error)
        self.assertIn("structures", done.result)
        self.assertTrue(done.finished)

    def test_to_dict(self):
        job = self.queue.submit(_request())
        self.queue.wait(job.id, timeout=60)
        data = self.queue.get(job.id).to_dict()
        self.assertEqual(data["job_id"], job.id)
        self.assertEqual(data["status"], "completed")
        self.assertIn("result", data)
        self.assertNotIn("result", self.queue.get(job.id).to_dict(include_result=False))

    def test_unknown_job(self):
        self.assertIsNone(self.queue.get("missing"))
        self.assertIsNone(self.queue.update("missing", progress=5))
        self.assertIsNone(self.queue.wait("missing"))

    def test_list_jobs_in_creation_order(self):
        a = self.queue.create()
        b = self.queue.create()
        self.assertEqual([j.id for j in self.queue.list_jobs()][-2:], [a.id, b.id])


class TestJobFailures(unittest.TestCase):

    def test_planner_exception(self):
        def boom(*args, **kwargs):
            raise RuntimeError("geometry backend unavailable")

        queue = JobQueue(planner=boom)
        try:
            job = queue.submit(_request())
            done = queue.wait(job.id, timeout=10)
        finally:
            queue.shutdown()
        self.assertEqual(done.status, JobStatus.FAILED)
        self.assertIn("geometry backend unavailable", done.error)
        self.assertIsNone(done.result)

    def test_input_error(self):
        def reject(*args, **kwargs):
            raise PlanningInputError(["latitude 95 outside [-90, 90]"])

        queue = JobQueue(planner=reject)
        try:
            done = queue.wait(queue.submit(_request()).id, timeout=10)
        finally:
            queue.shutdown()
        self.assertEqual(done.status, JobStatus.FAILED)
        self.assertIn("latitude 95", done.error)

    def test_processing_state_visible(self):
        started = threading.Event()
        release = threading.Event()

        def slow(land, config, exclusions, progress=None):
            progress(0.5)
            started.set()
            release.wait(10)
            raise RuntimeError("stopped")

        queue = JobQueue(planner=slow)
        try:
            job = queue.submit(_request())
            self.assertTrue(started.wait(10))
            current = queue.get(job.id)
            self.assertEqual(current.status, JobStatus.PROCESSING)
            self.assertEqual(current.progress, 50)
            release.set()
            queue.wait(job.id, timeout=10)
        finally:
            release.set()
            queue.shutdown()


class TestRetention(unittest.TestCase):

    def test_finished_jobs_expire(self):
        clock = _Clock()
        queue = JobQueue(retention_s=3600, clock=clock)
        try:
            old = queue.create()
            queue.update(old.id, status=JobStatus.COMPLETED)
            running = queue.create()
            queue.update(running.id, status=JobStatus.PROCESSING)

            clock.now += 3599
            self.assertEqual(queue.cleanup(), 0)

            clock.now += 2
            self.assertEqual(queue.cleanup(), 1)
            self.assertIsNone(queue.get(old.id))
            self.assertIsNotNone(queue.get(running.id))
        finally:
            queue.shutdown()

    def test_create_triggers_cleanup(self):
        clock = _Clock()
        queue = JobQueue(retention_s=10, clock=clock)
        try:
            old = queue.create()
            queue.update(old.id, status=JobStatus.FAILED, error="x")
            clock.now += 11
            queue.create()
            self.assertIsNone(queue.get(old.id))
        finally:
            queue.shutdown()


if __name__ == "__main__":
    unittest.main()
