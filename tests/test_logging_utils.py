"""JSON log formatting and counter tests."""

import json
import logging
import threading
import unittest

from agentcheck.logging_utils import Counter, JsonFormatter, Metrics


class TestCounters(unittest.TestCase):

    def test_concurrent_increments_are_not_lost(self):
        counter = Counter()
        barrier = threading.Barrier(8)

        def bump():
            barrier.wait()
            for _ in range(20000):
                counter.inc()

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30.0)
        self.assertEqual(counter.value, 8 * 20000)

    def test_counter_registry_returns_same_counter(self):
        metrics = Metrics()
        metrics.counter("reports_served").inc()
        metrics.counter("reports_served").inc(2)
        self.assertEqual(metrics.snapshot(), {"reports_served": 3})


class TestJsonFormatter(unittest.TestCase):

    def test_extra_fields_are_included(self):
        record = logging.LogRecord("agentcheck", logging.INFO, __file__, 1, "state set", None, None)
        record.channel = "control"
        record.peer = object()
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["msg"], "state set")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["name"], "agentcheck")
        self.assertEqual(payload["channel"], "control")
        self.assertIsInstance(payload["peer"], str)


if __name__ == "__main__":
    unittest.main()
