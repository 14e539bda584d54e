"""指标 facade 测试"""

from tavs.telemetry import metrics


class TestMetrics:
    """Metrics 测试"""

    def test_labels_are_order_independent(self):
        """标签顺序不影响计数键"""
        metrics.inc("sink.errors", {"kind": "unavailable", "sink": "null"})
        metrics.inc("sink.errors", {"sink": "null", "kind": "unavailable"})

        assert metrics.get_counter("sink.errors", {"kind": "unavailable", "sink": "null"}) == 2
        assert metrics.get_counter("sink.errors") == 0

    def test_gauge_overwrites(self):
        metrics.gauge("sessions.active", 3)
        metrics.gauge("sessions.active", 1)
        assert metrics.get_gauge("sessions.active") == 1

    def test_reset(self):
        metrics.inc("signals.sent", {"state": "idle"})
        metrics.gauge("sessions.active", 2)
        metrics.reset()
        assert metrics.get_counter("signals.sent", {"state": "idle"}) == 0
        assert metrics.get_gauge("sessions.active") == 0.0
