from topic_taxonomy.metrics import MetricsCollector, ResolutionOutcome


class TestMetricsCollector:
    def test_resolution_counts(self):
        collector = MetricsCollector(resolver_name="test")

        collector.record_resolution(ResolutionOutcome.MERGED, matched_templates=1)
        collector.record_resolution(ResolutionOutcome.MERGED, matched_templates=3)
        collector.record_resolution(ResolutionOutcome.SYNTHETIC)
        collector.record_resolution(ResolutionOutcome.FAILED)

        resolutions = collector.get_metrics_summary()["resolutions"]
        assert resolutions["total"] == 4  # noqa: PLR2004
        assert resolutions["merged"] == 2  # noqa: PLR2004
        assert resolutions["synthetic"] == 1
        assert resolutions["failed"] == 1
        assert resolutions["ambiguous"] == 1
        assert resolutions["failure_rate"] == 0.25  # noqa: PLR2004

    def test_queue_lookups(self):
        collector = MetricsCollector(resolver_name="test")

        collector.record_queue_lookup()
        collector.record_queue_lookup(success=False)

        assert collector.get_metrics_summary()["queue_lookups"] == {"total": 2, "failed": 1}

    def test_timers(self):
        collector = MetricsCollector(resolver_name="test")

        registry_timer = collector.start_timer("registry_fetch")
        subscription_timer = collector.start_timer("subscription_fetch")
        assert registry_timer != subscription_timer
        assert collector.get_metrics_summary()["active_timers"] == 2  # noqa: PLR2004

        assert collector.end_timer(registry_timer) >= 0
        assert collector.end_timer(subscription_timer) >= 0
        assert collector.end_timer("unknown") is None

        summary = collector.get_metrics_summary()
        assert summary["active_timers"] == 0
        assert len(collector.metrics.registry_fetch_times) == 1
        assert len(collector.metrics.subscription_fetch_times) == 1

    def test_empty_summary(self):
        summary = MetricsCollector(resolver_name="empty").get_metrics_summary()

        assert summary["resolver_name"] == "empty"
        assert summary["resolutions"]["failure_rate"] == 0
        assert summary["fetch_latency_ms"] == {"registry_avg": 0, "subscriptions_avg": 0}
