"""Tests for JobQueue."""

import asyncio

import pytest

from imgvariants.job_queue import JobQueue


class TestJobQueue:
    """Tests for JobQueue."""

    def test_init_defaults(self):
        """Test default concurrency."""
        queue = JobQueue()

        assert queue.concurrency == 10
        assert queue.size == 0
        assert queue.pending == 0

    def test_invalid_concurrency(self):
        """Test concurrency must be a positive integer."""
        with pytest.raises(ValueError):
            JobQueue(0)
        queue = JobQueue(2)
        with pytest.raises(ValueError):
            queue.concurrency = -1
        with pytest.raises(ValueError):
            queue.concurrency = True
        assert queue.concurrency == 2

    def test_returns_result(self):
        """Test add() returns the job result."""
        async def main():
            queue = JobQueue(2)

            async def job():
                return 42

            return await queue.add(job)

        assert asyncio.run(main()) == 42

    def test_bounded_concurrency(self):
        """Test no more than `concurrency` jobs are ever active."""
        active = 0
        max_active = 0

        async def job():
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01)
            active -= 1

        async def main():
            queue = JobQueue(2)
            await asyncio.gather(*(queue.add(job) for _ in range(8)))
            return queue

        queue = asyncio.run(main())

        assert max_active == 2
        assert queue.pending == 0
        assert queue.size == 0

    def test_fifo_admission(self):
        """Test waiting jobs start in arrival order."""
        started = []

        def make_job(n):
            async def job():
                started.append(n)
                await asyncio.sleep(0.001)
            return job

        async def main():
            queue = JobQueue(1)
            await asyncio.gather(*(queue.add(make_job(n)) for n in range(5)))

        asyncio.run(main())

        assert started == [0, 1, 2, 3, 4]

    def test_failure_isolated(self):
        """Test one failing job does not affect its siblings."""
        async def ok():
            await asyncio.sleep(0.001)
            return 'ok'

        async def boom():
            raise RuntimeError('boom')

        async def main():
            queue = JobQueue(1)
            return await asyncio.gather(
                queue.add(ok), queue.add(boom), queue.add(ok), return_exceptions=True
            ), queue

        results, queue = asyncio.run(main())

        assert results[0] == 'ok'
        assert isinstance(results[1], RuntimeError)
        assert results[2] == 'ok'
        assert queue.pending == 0

    def test_concurrency_change_applies_to_later_jobs(self):
        """Test raising concurrency lets later jobs run in parallel."""
        active = 0
        max_active = 0

        async def job():
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.01)
            active -= 1

        async def main():
            queue = JobQueue(1)
            await asyncio.gather(*(queue.add(job) for _ in range(3)))
            first_max = max_active
            queue.concurrency = 3
            await asyncio.gather(*(queue.add(job) for _ in range(3)))
            return first_max

        first_max = asyncio.run(main())

        assert first_max == 1
        assert max_active == 3

    def test_raised_concurrency_starts_waiting_jobs(self):
        """Test raising concurrency admits waiting and new jobs while a job still runs."""
        started = []

        async def main():
            queue = JobQueue(1)
            release = asyncio.Event()

            async def job(name):
                started.append(name)
                await release.wait()

            first = asyncio.ensure_future(queue.add(lambda: job('a')))
            second = asyncio.ensure_future(queue.add(lambda: job('b')))
            await asyncio.sleep(0)
            before = list(started)

            queue.concurrency = 3
            third = asyncio.ensure_future(queue.add(lambda: job('c')))
            for _ in range(3):
                await asyncio.sleep(0)
            during = sorted(started)
            pending = queue.pending

            release.set()
            await asyncio.gather(first, second, third)
            return before, during, pending

        before, during, pending = asyncio.run(main())

        assert before == ['a']
        assert during == ['a', 'b', 'c']
        assert pending == 3

    def test_size_and_pending(self):
        """Test size counts waiting jobs and pending counts running ones."""
        async def main():
            queue = JobQueue(1)
            release = asyncio.Event()

            async def job():
                await release.wait()

            tasks = [asyncio.ensure_future(queue.add(job)) for _ in range(3)]
            await asyncio.sleep(0)
            snapshot = (queue.pending, queue.size)
            release.set()
            await asyncio.gather(*tasks)
            await queue.idle()
            return snapshot, (queue.pending, queue.size)

        during, after = asyncio.run(main())

        assert during == (1, 2)
        assert after == (0, 0)

    def test_cancelled_waiter_leaves_queue(self):
        """Test cancelling a waiting job frees its place in line."""
        async def main():
            queue = JobQueue(1)
            release = asyncio.Event()

            async def job():
                await release.wait()
                return 'done'

            running = asyncio.ensure_future(queue.add(job))
            waiting = asyncio.ensure_future(queue.add(job))
            await asyncio.sleep(0)
            waiting.cancel()
            await asyncio.sleep(0)
            size = queue.size
            release.set()
            return size, await running, queue

        size, result, queue = asyncio.run(main())

        assert size == 0
        assert result == 'done'
        assert queue.pending == 0
