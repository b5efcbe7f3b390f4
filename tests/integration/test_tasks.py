"""
Integration Tests for the scheduled deadline sweep
"""
from hostel_portal import tasks
from hostel_portal.core.background_tasks import DEADLINE_SWEEP_TASK, build_beat_schedule, celery_app
from hostel_portal.schemas.settings import HostelSettingsUpdate
from hostel_portal.tasks import get_worker_store, run_deadline_sweep, sweep_deadlines


class TestSweepDeadlines:

    def test_flags_and_revokes_overdue(self, store, clock, allocation_service, settings_service, eagle):
        settings_service.update_settings(HostelSettingsUpdate(payment_grace_period=24))
        hostel_id, room_id = eagle
        allocation = allocation_service.allocate("H123456X", room_id, hostel_id)
        clock.advance(hours=25)

        summary = sweep_deadlines(store, clock)

        assert summary["markedOverdue"] == 1
        assert summary["revokedOverdue"] == 1
        assert summary["revokedCount"] == 0
        assert allocation_service.get_allocation(allocation.id) is None

    def test_nothing_due(self, store, clock):
        summary = sweep_deadlines(store, clock)

        assert summary["markedOverdue"] == 0
        assert summary["message"] == "Payment deadline check completed"


class TestCeleryWiring:

    def test_worker_reuses_one_store(self, monkeypatch):
        get_worker_store.cache_clear()
        used = []
        monkeypatch.setattr(tasks, "sweep_deadlines", lambda store: used.append(store) or {})

        run_deadline_sweep()
        run_deadline_sweep()

        assert len(used) == 2
        assert used[0] is used[1]
        get_worker_store.cache_clear()

    def test_task_registered(self):
        assert DEADLINE_SWEEP_TASK in celery_app.tasks

    def test_beat_schedule_uses_configured_time(self, config):
        config.DEADLINE_SWEEP_CRON_HOUR = "3"

        schedule = build_beat_schedule(config)

        entry = next(iter(schedule.values()))
        assert entry["task"] == DEADLINE_SWEEP_TASK
        assert entry["schedule"].hour == {3}
