import time
from unittest import IsolatedAsyncioTestCase

from config import BatchConfig
from schemas.bulk import BatchItemFailure, BatchItemSuccess
from services.batch_processor import chunk, process_batch
from services.errors import CapacityError, ValidationError
from tests.stubs import StubFetcher


class _SleepSpy:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def _config(group_size=2, delay_ms=0, max_items=50):
    return BatchConfig(group_size=group_size, inter_group_delay_ms=delay_ms, max_items=max_items)


def test_chunk_keeps_order_and_short_tail():
    assert chunk(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert chunk(["a"], 5) == [["a"]]


class ProcessBatchTests(IsolatedAsyncioTestCase):
    async def test_isolates_single_failure(self):
        fetcher = StubFetcher(failures={"b": RuntimeError("Transcript is disabled on this video")})

        results, summary = await process_batch(["a", "b", "c"], _config(), fetcher)

        self.assertEqual([r.videoId for r in results], ["a", "b", "c"])
        self.assertIsInstance(results[0], BatchItemSuccess)
        self.assertIsInstance(results[1], BatchItemFailure)
        self.assertIsInstance(results[2], BatchItemSuccess)
        self.assertEqual(results[1].error, "Transcripción no disponible")
        self.assertEqual(results[0].transcript, "[00:00:00] Hello\n\n[00:00:01] World")
        self.assertEqual(results[0].metadata.segments, 2)
        self.assertEqual((summary.total, summary.successful, summary.failed), (3, 2, 1))

    async def test_empty_transcript_is_a_failure(self):
        fetcher = StubFetcher(empty=["b"])

        results, summary = await process_batch(["a", "b"], _config(), fetcher)

        self.assertTrue(results[0].success)
        self.assertFalse(results[1].success)
        self.assertEqual(results[1].error, "No se encontró transcripción para este video")
        self.assertEqual(summary.failed, 1)

    async def test_output_follows_input_order_despite_completion_order(self):
        fetcher = StubFetcher(delays={"slow": 0.05})

        results, _ = await process_batch(["slow", "fast", "x"], _config(group_size=3), fetcher)

        self.assertEqual([r.videoId for r in results], ["slow", "fast", "x"])

    async def test_pauses_between_groups_only(self):
        sleep = _SleepSpy()

        await process_batch(["a", "b", "c", "d", "e"], _config(delay_ms=250), StubFetcher(), sleep=sleep)

        self.assertEqual(sleep.calls, [0.25, 0.25])

    async def test_zero_delay_disables_pacing(self):
        sleep = _SleepSpy()

        await process_batch(["a", "b", "c", "d"], _config(delay_ms=0), StubFetcher(), sleep=sleep)

        self.assertEqual(sleep.calls, [])

    async def test_single_group_has_no_delay(self):
        sleep = _SleepSpy()

        results, summary = await process_batch(["a"], _config(group_size=10, delay_ms=500), StubFetcher(), sleep=sleep)

        self.assertEqual(sleep.calls, [])
        self.assertEqual(summary.total, 1)
        self.assertEqual(len(results), 1)

    async def test_elapsed_includes_inter_group_delay(self):
        started = time.perf_counter()

        _, summary = await process_batch(["a", "b", "c", "d"], _config(group_size=2, delay_ms=100), StubFetcher())

        wall = (time.perf_counter() - started) * 1000
        self.assertGreaterEqual(summary.processingTimeMs, 100)
        self.assertLessEqual(summary.processingTimeMs, wall + 1)

    async def test_group_members_run_concurrently(self):
        fetcher = StubFetcher(delay=0.1)

        _, summary = await process_batch(["a", "b", "c"], _config(group_size=3), fetcher)

        self.assertLess(summary.processingTimeMs, 250)
        self.assertEqual(sorted(fetcher.calls), ["a", "b", "c"])

    async def test_oversized_batch_fetches_nothing(self):
        fetcher = StubFetcher()

        with self.assertRaises(CapacityError) as ctx:
            await process_batch(["v"] * 4, _config(max_items=3), fetcher)

        self.assertEqual(fetcher.calls, [])
        self.assertEqual(ctx.exception.message, "Máximo 3 videos permitidos. Recibidos: 4")

    async def test_empty_batch_is_rejected(self):
        with self.assertRaises(ValidationError):
            await process_batch([], _config(), StubFetcher())

    async def test_repeated_batches_refetch(self):
        fetcher = StubFetcher()

        await process_batch(["a"], _config(), fetcher)
        await process_batch(["a"], _config(), fetcher)

        self.assertEqual(fetcher.calls, ["a", "a"])
