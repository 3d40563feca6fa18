import logging
import unittest

from meshmerge import log
from meshmerge.core import Event, TaskScheduler


def counter(n, trace):
    for i in range(n):
        trace.append(i)
        yield i
    return n


def broken():
    yield 1
    raise RuntimeError("boom")


class EventTest(unittest.TestCase):
    def test_subscribe_emit_unsubscribe(self):
        event = Event("changed")
        got = []
        handler = got.append
        event += handler
        event += handler
        event.emit(1)
        event -= handler
        event.emit(2)
        self.assertEqual(got, [1])
        self.assertFalse(event)

    def test_unsubscribe_during_emit(self):
        event = Event()
        got = []

        def once(value):
            got.append(value)
            event.__isub__(once)

        event += once
        event += got.append
        event.emit("x")
        event.emit("y")
        self.assertEqual(got, ["x", "x", "y"])


class TaskSchedulerTest(unittest.TestCase):
    def test_tasks_interleave(self):
        trace_a, trace_b = [], []
        scheduler = TaskScheduler()
        scheduler.add(counter(3, trace_a))
        scheduler.add(counter(1, trace_b))
        self.assertEqual(scheduler.tick(), 2)
        self.assertEqual((trace_a, trace_b), ([0], [0]))
        self.assertEqual(scheduler.tick(), 1)
        scheduler.run_until_complete()
        self.assertEqual(trace_a, [0, 1, 2])
        self.assertFalse(scheduler)

    def test_result_and_on_done(self):
        done = []
        scheduler = TaskScheduler()
        task = scheduler.add(counter(2, []), name="count", on_done=done.append)
        scheduler.run_until_complete()
        self.assertEqual(task.result, 2)
        self.assertEqual(task.steps, 2)
        self.assertEqual(done, [task])

    def test_failure_is_logged_not_raised(self):
        scheduler = TaskScheduler()
        task = scheduler.add(broken(), name="broken")
        scheduler.run_until_complete()
        self.assertTrue(task.failed)
        self.assertTrue(task.finished)

    def test_max_ticks_and_clear(self):
        scheduler = TaskScheduler()
        scheduler.add(counter(100, []))
        self.assertEqual(scheduler.run_until_complete(max_ticks=5), 5)
        self.assertEqual(scheduler.pending, 1)
        task = scheduler.add(counter(3, []))
        self.assertEqual(scheduler.clear(), 2)
        self.assertEqual(scheduler.pending, 0)
        self.assertTrue(task.finished)
        self.assertTrue(task.cancelled)


class LogTest(unittest.TestCase):
    def setUp(self):
        self.records = []
        log.set_callback(lambda level, message: self.records.append((level, message)))
        log.set_level("debug")

    def tearDown(self):
        log.set_callback(None)
        log.set_level(logging.WARNING)

    def test_levels(self):
        log.debug("d")
        log.info("i")
        log.warn("w")
        log.warning("w2")
        log.error("e")
        self.assertEqual(self.records, [("debug", "d"), ("info", "i"), ("warn", "w"), ("warn", "w2"), ("error", "e")])

    def test_exception_with_context(self):
        try:
            raise ValueError("bad value")
        except ValueError as e:
            log.error(e, "[Test] Failed")
        level, message = self.records[0]
        self.assertEqual(level, "error")
        self.assertTrue(message.startswith("[Test] Failed: ValueError: bad value"))
        self.assertIn("Traceback", message)

    def test_level_filter(self):
        log.set_level("error")
        log.warn("hidden")
        self.assertEqual(self.records, [])

    def test_remove_callback(self):
        log.set_callback(None)
        log.error("not captured")
        self.assertEqual(self.records, [])


if __name__ == '__main__':
    unittest.main()
