"""Tests for session.py - the timed analysis state machine."""

from __future__ import annotations

import pytest

from ecolight.assembler import ResultAssembler
from ecolight.catalog import PlantCatalog
from ecolight.matcher import PlantMatcher
from ecolight.session import AnalysisSession, AnalysisSessionController, Observable, SessionState
from ecolight.storage import StorageError


class FailingGateway:
    def append(self, record):
        raise StorageError("read-only filesystem")

    def list_all(self):
        return []


class TestObservable:
    """Tests for Observable."""

    def test_listeners_receive_updates(self):
        seen = []
        value = Observable(0)
        value.add_listener(seen.append)
        value.set(1)
        value.set(2)
        assert seen == [1, 2]
        assert value.value == 2

    def test_remove_listener(self):
        seen = []
        value = Observable("a")
        remove = value.add_listener(seen.append)
        remove()
        remove()
        value.set("b")
        assert seen == []


class TestIdle:
    """Controller behaviour outside of sessions."""

    def test_initial_state(self, controller):
        assert controller.state is SessionState.IDLE
        assert controller.session is None
        assert controller.current_lux.value == 0.0
        assert controller.progress.value == 0.0
        assert controller.is_analyzing.value is False

    def test_initial_lux_taken_from_feed(self, feed, assembler, scheduler):
        feed.publish(321.0)
        with AnalysisSessionController(feed, assembler, scheduler=scheduler) as ctrl:
            assert ctrl.current_lux.value == 321.0

    def test_samples_update_current_lux_when_idle(self, controller, feed):
        feed.publish(150.0)
        assert controller.current_lux.value == 150.0

    @pytest.mark.parametrize("bad", [-1.0, float("nan"), float("inf")])
    def test_invalid_samples_ignored(self, controller, feed, bad):
        feed.publish(80.0)
        feed.publish(bad)
        assert controller.current_lux.value == 80.0

    def test_negative_duration_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.start("cactus", duration_seconds=-1)
        assert controller.state is SessionState.IDLE


class TestTimedSession:
    """Sessions with a sampling window."""

    def test_start_enters_running(self, controller):
        session = controller.start("cactus", "img://1", duration_seconds=5)
        assert session is not None
        assert controller.state is SessionState.RUNNING
        assert controller.is_analyzing.value is True
        assert controller.time_remaining.value == 5
        assert session.image_ref == "img://1"
        assert not session.finished

    def test_average_of_buffered_samples(self, controller, feed, scheduler, store):
        session = controller.start("cactus", duration_seconds=10)
        for lux in (5800.0, 6000.0, 6200.0, 6400.0):
            feed.publish(lux)
            scheduler.advance(2.0)
        scheduler.advance(3.0)

        record = session.wait(timeout=0)
        assert record.average_lux == pytest.approx(6100.0)
        assert record.readings_trace == (5800.0, 6000.0, 6200.0, 6400.0)
        assert record.duration_seconds == 10
        assert record.is_suitable is True
        assert "Excelente" in record.recommendation
        assert controller.state is SessionState.IDLE
        assert store.list_all() == [record]

    def test_samples_before_start_are_not_buffered(self, controller, feed, scheduler):
        feed.publish(10.0)
        session = controller.start("helecho", duration_seconds=1)
        feed.publish(1000.0)
        scheduler.advance(2.0)
        assert session.wait(timeout=0).readings_trace == (1000.0,)

    def test_samples_after_deadline_are_not_buffered(self, controller, feed, scheduler):
        session = controller.start("helecho", duration_seconds=1)
        feed.publish(1000.0)
        scheduler.advance(2.0)
        feed.publish(99999.0)
        assert session.wait(timeout=0).readings_trace == (1000.0,)
        assert controller.current_lux.value == 99999.0

    def test_samples_are_timestamped_with_scheduler_time(self, controller, feed, scheduler):
        session = controller.start("helecho", duration_seconds=2)
        scheduler.advance(0.5)
        feed.publish(700.0)
        assert session.readings.samples[0].captured_at == pytest.approx(0.5)
        scheduler.advance(2.0)

    def test_no_samples_falls_back_to_current_lux(self, controller, feed, scheduler):
        feed.publish(1800.0)
        session = controller.start("helecho", duration_seconds=3)
        scheduler.advance(4.0)
        record = session.wait(timeout=0)
        assert record.average_lux == 1800.0
        assert record.readings_trace == ()

    def test_silent_sensor_averages_zero(self, controller, scheduler):
        session = controller.start("helecho", duration_seconds=1)
        scheduler.advance(2.0)
        record = session.wait(timeout=0)
        assert record.average_lux == 0.0
        assert record.is_suitable is False
        assert record.recommendation.startswith("Muy poca luz")

    def test_progress_is_monotonic_and_reaches_one(self, controller, scheduler):
        progress = []
        remaining = []
        controller.progress.add_listener(progress.append)
        controller.time_remaining.add_listener(remaining.append)

        controller.start("cactus", duration_seconds=2)
        scheduler.advance(3.0)

        window, reset = progress[:-1], progress[-1]
        assert window == sorted(window)
        assert window[-1] == 1.0
        assert reset == 0.0
        assert all(0.0 <= p <= 1.0 for p in progress)
        # ceil() of the time left, counting down to zero
        assert remaining[0] == 2
        assert remaining[1:-1] == sorted(remaining[1:-1], reverse=True)
        assert remaining[-1] == 0

    def test_progress_midway(self, controller, scheduler):
        controller.start("cactus", duration_seconds=10)
        scheduler.advance(2.5)
        assert controller.progress.value == pytest.approx(0.25, abs=0.011)
        assert controller.time_remaining.value == 8

    def test_progress_reaches_one_within_one_tick_of_deadline(self, controller, scheduler):
        seen = []
        controller.progress.add_listener(seen.append)
        session = controller.start("cactus", duration_seconds=1)
        scheduler.advance(1.0 + controller.tick_interval)
        assert 1.0 in seen
        assert session.finished

    def test_tick_task_cancelled_after_deadline(self, controller, scheduler):
        controller.start("cactus", duration_seconds=1)
        assert scheduler.pending == 1
        scheduler.advance(2.0)
        assert scheduler.pending == 0

    def test_search_runs_after_sampling(self, controller, scheduler):
        session = controller.start("cactus", duration_seconds=1)
        scheduler.advance(1.05)
        assert session.finished
        # the one-second simulated search is charged to the clock after the deadline
        assert scheduler.now() == pytest.approx(2.0)


class TestInstantSession:
    """Sessions with duration 0."""

    def test_uses_current_lux_and_empty_trace(self, controller, feed, scheduler):
        feed.publish(6000.0)
        session = controller.start("cactus", duration_seconds=0)

        assert session.finished
        record = session.wait(timeout=0)
        assert record.average_lux == 6000.0
        assert record.readings_trace == ()
        assert record.duration_seconds == 0
        assert scheduler.pending == 0
        assert controller.state is SessionState.IDLE

    def test_back_to_idle_and_reusable(self, controller, feed):
        feed.publish(100.0)
        first = controller.start("helecho")
        feed.publish(2000.0)
        second = controller.start("helecho")
        assert first.wait(timeout=0).average_lux == 100.0
        assert second.wait(timeout=0).average_lux == 2000.0


class TestRejection:
    """Only one session may be active."""

    def test_start_while_running_is_rejected(self, controller, scheduler):
        first = controller.start("cactus", duration_seconds=5)
        scheduler.advance(1.0)
        assert controller.start("helecho", duration_seconds=0) is None
        assert controller.session is first
        assert controller.state is SessionState.RUNNING

    def test_start_while_searching_is_rejected(self, feed, store, clock, scheduler):
        attempts = []

        class ReentrantMatcher(PlantMatcher):
            def search(self, query):
                attempts.append((ctrl.state, ctrl.is_searching.value, ctrl.start("helecho")))
                return super().search(query)

        assembler = ResultAssembler(ReentrantMatcher(search_delay=0), store, clock=clock)
        ctrl = AnalysisSessionController(feed, assembler, scheduler=scheduler)
        session = ctrl.start("cactus", duration_seconds=0)

        assert attempts == [(SessionState.FINALIZING, True, None)]
        assert session.finished
        assert len(store.list_all()) == 1
        ctrl.close()

    def test_rejection_leaves_buffer_untouched(self, controller, feed, scheduler):
        session = controller.start("cactus", duration_seconds=3)
        feed.publish(6000.0)
        controller.start("cactus", duration_seconds=3)
        feed.publish(7000.0)
        scheduler.advance(4.0)
        assert session.wait(timeout=0).readings_trace == (6000.0, 7000.0)


class TestFailures:
    """Persistence failures and teardown."""

    def test_storage_failure_surfaces_on_wait(self, feed, clock, scheduler):
        assembler = ResultAssembler(PlantMatcher(search_delay=0), FailingGateway(), clock=clock)
        with AnalysisSessionController(feed, assembler, scheduler=scheduler) as ctrl:
            feed.publish(6000.0)
            session = ctrl.start("cactus", duration_seconds=2)
            scheduler.advance(3.0)

            assert session.finished
            assert isinstance(session.error, StorageError)
            with pytest.raises(StorageError, match="read-only"):
                session.wait(timeout=0)
            assert session.average_lux == 6000.0
            assert ctrl.state is SessionState.IDLE
            assert ctrl.is_searching.value is False
            assert ctrl.start("cactus") is not None

    def test_wait_times_out_while_running(self, controller):
        session = controller.start("cactus", duration_seconds=5)
        with pytest.raises(TimeoutError):
            session.wait(timeout=0)

    def test_wait_without_record_raises(self):
        session = AnalysisSession("cactus", duration_seconds=0, started_at=0.0)
        session._done.set()
        with pytest.raises(RuntimeError):
            session.wait(timeout=0)

    def test_infinite_sample_not_buffered(self, controller, feed, scheduler, store):
        session = controller.start("helecho", duration_seconds=1)
        feed.publish(float("inf"))
        feed.publish(1200.0)
        scheduler.advance(2.0)
        record = session.wait(timeout=0)
        assert record.readings_trace == (1200.0,)
        assert record.average_lux == 1200.0
        assert store.list_all()[0].readings_trace == (1200.0,)

    def test_close_unsubscribes_once(self, feed, assembler, scheduler):
        ctrl = AnalysisSessionController(feed, assembler, scheduler=scheduler)
        assert feed.subscriber_count == 1
        ctrl.close()
        ctrl.close()
        assert feed.subscriber_count == 0
        assert ctrl.closed

    def test_context_manager_unsubscribes(self, feed, assembler, scheduler):
        with AnalysisSessionController(feed, assembler, scheduler=scheduler):
            assert feed.subscriber_count == 1
        assert feed.subscriber_count == 0

    def test_start_after_close_raises(self, feed, assembler, scheduler):
        ctrl = AnalysisSessionController(feed, assembler, scheduler=scheduler)
        ctrl.close()
        with pytest.raises(RuntimeError):
            ctrl.start("cactus")

    def test_unmatched_plant_uses_fallback(self, feed, store, clock, scheduler):
        assembler = ResultAssembler(PlantMatcher(PlantCatalog(), search_delay=0), store, clock=clock)
        with AnalysisSessionController(feed, assembler, scheduler=scheduler) as ctrl:
            feed.publish(600.0)
            record = ctrl.start("xyz-unknown-plant").wait(timeout=0)
        assert record.plant_name == "xyz-unknown-plant"
        assert record.is_suitable is True
        assert "no species-specific data found" in record.recommendation
