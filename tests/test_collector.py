"""Tests for StatsCollector."""

from unittest.mock import MagicMock

import pytest
from conftest import FakeRuntime, FakeSource, make_counters

from container_stats.core.exceptions import RuntimeUnavailable
from container_stats.core.schemas import MemoryBackend
from container_stats.monitoring.base import ContainerHandle
from container_stats.monitoring.collector import ProcessFailure, StatsCollector


def handle(container_id, *names, pid=None):
    return ContainerHandle(id=container_id, names=list(names), primary_process_id=pid)


class TestStatsCollector:
    """Tests for StatsCollector class."""

    @pytest.fixture
    def source(self):
        return FakeSource(
            maps={
                11: [100],
                21: [200],
                22: [300],
                23: [400],
                31: [1000],
            },
            counters={
                11: make_counters(rss=10, vsz=110),
                21: make_counters(rss=20, vsz=120),
                22: make_counters(rss=30, vsz=130),
                23: make_counters(rss=40, vsz=140),
                31: make_counters(rss=50, vsz=150),
            },
        )

    @pytest.fixture
    def runtime(self):
        return FakeRuntime(
            processes={"c1": [11], "c2": [21, 22, 23], "c3": [31]},
            primary_pids={"c1": 11, "c2": 21, "c3": 31},
        )

    @pytest.fixture
    def containers(self):
        return [
            handle("c1", "web-1", pid=11),
            handle("c2", "app-1", pid=21),
            handle("c3", "db-1", "db-alias", pid=31),
        ]

    def test_output_matches_input_order(self, runtime, source, containers):
        stats = StatsCollector(runtime, source).collect(containers)

        assert [s.id for s in stats] == ["c1", "c2", "c3"]
        assert len(stats) == len(containers)

    def test_names_joined(self, runtime, source, containers):
        stats = StatsCollector(runtime, source).collect(containers)
        assert stats[2].name == "db-1, db-alias"

    def test_primary_pid_only_without_top(self, runtime, source, containers):
        stats = StatsCollector(runtime, source).collect(containers)

        assert stats[1].memory_bytes == 200
        assert not [c for c in runtime.calls if c[0] == "top"]

    def test_top_sums_all_processes(self, runtime, source, containers):
        stats = StatsCollector(runtime, source, use_top=True).collect(containers)

        assert stats[1].memory_bytes == 200 + 300 + 400
        assert ("top", "c2") in runtime.calls

    def test_backend_selection(self, runtime, source, containers):
        rss = StatsCollector(runtime, source, backend=MemoryBackend.RSS, use_top=True)
        vsz = StatsCollector(runtime, source, backend="vsz", use_top=True)

        assert rss.collect(containers)[1].memory_bytes == 20 + 30 + 40
        assert vsz.collect(containers)[1].memory_bytes == 120 + 130 + 140

    def test_primary_pid_resolved_when_missing(self, runtime, source):
        stats = StatsCollector(runtime, source).collect([handle("c3", "db-1")])

        assert stats[0].memory_bytes == 1000
        assert ("inspect", "c3") in runtime.calls

    def test_failed_process_is_excluded(self, runtime, containers):
        """One of three pids failing leaves the sum over the other two."""
        source = FakeSource(
            maps={11: [100], 21: [200], 23: [400], 31: [1000]},
            counters={11: make_counters(), 21: make_counters(), 23: make_counters(),
                      31: make_counters()},
        )
        collector = StatsCollector(runtime, source, use_top=True)

        stats = collector.collect(containers)

        assert stats[1].memory_bytes == 200 + 400
        assert stats[0].memory_bytes == 100
        assert stats[2].memory_bytes == 1000
        assert ProcessFailure("c2", 22, "memory", "NoSuchProcess") in collector.failures
        assert ProcessFailure("c2", 22, "cpu", "NoSuchProcess") in collector.failures
        assert len(collector.failures) == 2

    def test_memory_and_cpu_fail_independently(self, runtime):
        source = FakeSource(maps={11: [100]}, counters={})
        collector = StatsCollector(runtime, source)

        stats = collector.collect([handle("c1", "web-1", pid=11)])

        assert stats[0].memory_bytes == 100
        assert stats[0].average_cpu_percent == 0.0
        assert [f.metric for f in collector.failures] == ["cpu"]

    def test_every_process_failing_gives_zero_record(self, runtime, containers):
        collector = StatsCollector(runtime, FakeSource(), use_top=True)

        stats = collector.collect(containers)

        assert [s.memory_bytes for s in stats] == [0, 0, 0]
        assert len(collector.failures) == 2 * 5

    def test_cpu_summed_across_processes(self, runtime):
        source = FakeSource(
            maps={21: [1], 22: [1], 23: [1]},
            counters={
                21: make_counters(ticks=100 * 10, started_seconds_ago=100),
                22: make_counters(ticks=100 * 20, started_seconds_ago=100),
                23: make_counters(ticks=0, started_seconds_ago=100),
            },
            ticks=100,
        )
        collector = StatsCollector(runtime, source, use_top=True)

        stats = collector.collect([handle("c2", "app-1")])

        assert stats[0].average_cpu_percent == pytest.approx(30.0, rel=0.05)

    def test_vanished_container_yields_empty_record(self, source):
        runtime = FakeRuntime(processes={"c1": [11]})
        collector = StatsCollector(runtime, source, use_top=True)

        stats = collector.collect([handle("c1", "web-1"), handle("gone", "tmp-1")])

        assert len(stats) == 2
        assert stats[1].id == "gone"
        assert stats[1].memory_bytes == 0
        assert collector.failures == [ProcessFailure("gone", None, "pids", "no such container")]

    def test_runtime_failure_propagates(self, source):
        runtime = MagicMock()
        runtime.list_container_processes.side_effect = RuntimeUnavailable("daemon gone")
        collector = StatsCollector(runtime, source, use_top=True)

        with pytest.raises(RuntimeUnavailable):
            collector.collect([handle("c1", "web-1")])

    def test_empty_input(self, runtime, source):
        collector = StatsCollector(runtime, source)
        assert collector.collect([]) == []
        assert collector.failures == []

    def test_failures_reset_between_runs(self, runtime, containers):
        collector = StatsCollector(runtime, FakeSource())
        collector.collect(containers)
        assert collector.failures

        collector.collect([])
        assert collector.failures == []

    def test_parallel_matches_sequential(self, runtime, source, containers):
        sequential = StatsCollector(runtime, source, use_top=True).collect(containers)
        parallel = StatsCollector(runtime, source, use_top=True, workers=3).collect(containers)

        assert [s.memory_bytes for s in parallel] == [s.memory_bytes for s in sequential]
        assert [s.id for s in parallel] == ["c1", "c2", "c3"]

    def test_injected_logger_receives_failures(self, runtime, containers):
        log = MagicMock()
        collector = StatsCollector(runtime, FakeSource(maps={11: [1]}), log=log)

        collector.collect(containers[:1])

        log.error.assert_called_once()
        assert "Failed to get average CPU for process 11" in log.error.call_args[0][0]
        log.warning.assert_called_once()
