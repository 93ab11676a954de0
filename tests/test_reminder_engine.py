"""Tests for the reminder engine: report, tick, accelerate and restart."""

import json
from datetime import timedelta

import pytest

from beetbell.db.models import Settings
from beetbell.engine.errors import Debounced, ValidationError
from beetbell.engine.reminder_engine import ReminderEngine
from beetbell.utils.constants import EVENTS_KEY, SETTINGS_KEY
from beetbell.utils.time_utils import to_epoch_ms

from conftest import T0, FailingStore, RecordingStore, RecordingTrigger

HOUR_HALF_HOUR = Settings(reminder_hours=1, cooldown_minutes=30)
NO_COOLDOWN = Settings(reminder_hours=1, cooldown_minutes=0)


async def started_engine(store, trigger=None, settings=HOUR_HALF_HOUR, now=T0) -> ReminderEngine:
    engine = ReminderEngine(store, trigger=trigger, default_settings=settings)
    await engine.init(now)
    return engine


@pytest.mark.asyncio
async def test_report_schedules_event(store):
    """An accepted report fires reminder_delay later and arms the gate."""
    engine = await started_engine(store)

    event = await engine.report_event(T0)

    assert event.report_time == T0
    assert event.fire_time == T0 + timedelta(hours=1)
    assert event.delay_hours_used == 1
    assert engine.last_accepted_report_time == T0
    assert engine.ledger.events == [event]


@pytest.mark.asyncio
async def test_report_inside_cooldown_is_rejected_without_mutation(store):
    engine = await started_engine(store)
    await engine.report_event(T0)
    snapshot = dict(store.data)
    writes = len(store.writes)

    with pytest.raises(Debounced) as exc_info:
        await engine.report_event(T0 + timedelta(minutes=15))

    assert exc_info.value.remaining == timedelta(minutes=15)
    assert len(engine.ledger) == 1
    assert engine.last_accepted_report_time == T0
    assert store.data == snapshot
    assert len(store.writes) == writes


@pytest.mark.asyncio
async def test_hour_and_half_hour_scenario(store, trigger):
    """delay=1h, cooldown=30m: report, rejected report, accepted report."""
    engine = await started_engine(store, trigger)

    e1 = await engine.report_event(T0)
    assert e1.fire_time == T0 + timedelta(seconds=3600)

    with pytest.raises(Debounced) as exc_info:
        await engine.report_event(T0 + timedelta(seconds=900))
    assert exc_info.value.remaining == timedelta(seconds=900)
    assert engine.remaining_cooldown(T0 + timedelta(seconds=900)) == timedelta(seconds=900)

    e2 = await engine.report_event(T0 + timedelta(seconds=1801))
    assert e2.fire_time == T0 + timedelta(seconds=1801 + 3600)
    assert len(engine.ledger) == 2

    await engine.tick(T0 + timedelta(seconds=3599))
    assert trigger.fired == []

    await engine.tick(T0 + timedelta(seconds=3600))
    assert [e.id for e in trigger.fired] == [e1.id]

    await engine.tick(T0 + timedelta(seconds=1801 + 3600))
    assert [e.id for e in trigger.fired] == [e1.id, e2.id]
    assert len(engine.ledger) == 0


@pytest.mark.asyncio
async def test_zero_cooldown_accepts_every_report(store):
    engine = await started_engine(store, settings=NO_COOLDOWN)

    events = [await engine.report_event(T0) for _ in range(3)]
    events.append(await engine.report_event(T0 + timedelta(milliseconds=1)))

    assert len(engine.ledger) == 4
    assert len({e.id for e in events}) == 4


@pytest.mark.asyncio
async def test_tick_fires_once(store, trigger):
    """Ticking twice at the same instant does not fire twice."""
    engine = await started_engine(store, trigger)
    await engine.report_event(T0)
    now = T0 + timedelta(hours=1)

    first = await engine.tick(now)
    second = await engine.tick(now)

    assert len(first.just_expired) == 1
    assert second.just_expired == []
    assert len(trigger.fired) == 1
    assert engine.alert_active

    engine.dismiss_alert()
    assert not engine.alert_active


@pytest.mark.asyncio
async def test_report_and_tick_same_instant(store, trigger):
    """A tick at the report instant does not expire the new event."""
    engine = await started_engine(store, trigger)
    event = await engine.report_event(T0)

    result = await engine.tick(T0)

    assert result.just_expired == []
    assert result.updated == [event]
    assert event.remaining == timedelta(hours=1)
    assert trigger.fired == []


@pytest.mark.asyncio
async def test_tick_clears_elapsed_cooldown(store):
    engine = await started_engine(store)
    await engine.report_event(T0)

    await engine.tick(T0 + timedelta(minutes=29))
    assert engine.last_accepted_report_time == T0

    await engine.tick(T0 + timedelta(minutes=30))
    assert engine.last_accepted_report_time is None
    assert engine.can_report(T0 + timedelta(minutes=30))


@pytest.mark.asyncio
async def test_idle_tick_is_noop(store, trigger):
    engine = await started_engine(store, trigger)

    result = await engine.tick(T0)

    assert result.updated == [] and result.just_expired == []
    assert store.writes == []
    assert trigger.fired == []


@pytest.mark.asyncio
async def test_accelerate_all_fires_each_once(store, trigger):
    """Two live events both fire on the next tick, then the gate reopens."""
    engine = await started_engine(store, trigger, settings=NO_COOLDOWN)
    e1 = await engine.report_event(T0)
    e2 = await engine.report_event(T0 + timedelta(minutes=1))

    count = await engine.accelerate_all()

    assert count == 2
    assert trigger.accelerated == [2]
    assert engine.last_accepted_report_time is None
    assert json.loads(store.data[EVENTS_KEY]) == []

    result = await engine.tick(T0 + timedelta(minutes=2))
    assert [e.id for e in result.just_expired] == [e1.id, e2.id]
    assert [e.id for e in trigger.fired] == [e1.id, e2.id]
    assert len(engine.ledger) == 0

    again = await engine.tick(T0 + timedelta(minutes=2))
    assert again.just_expired == []
    assert len(trigger.fired) == 2


@pytest.mark.asyncio
async def test_accelerate_reopens_gate_inside_cooldown(store):
    engine = await started_engine(store)
    await engine.report_event(T0)

    await engine.accelerate_all()

    assert engine.can_report(T0 + timedelta(minutes=1))
    await engine.report_event(T0 + timedelta(minutes=1))


@pytest.mark.asyncio
async def test_clear_all_does_not_fire(store, trigger):
    engine = await started_engine(store, trigger)
    await engine.report_event(T0)

    await engine.clear_all()
    await engine.tick(T0 + timedelta(hours=2))

    assert trigger.fired == []
    assert engine.last_accepted_report_time is None
    assert json.loads(store.data[EVENTS_KEY]) == []


@pytest.mark.asyncio
async def test_trigger_failure_does_not_stop_other_fires(store):
    engine = await started_engine(store, settings=NO_COOLDOWN)
    e1 = await engine.report_event(T0)
    e2 = await engine.report_event(T0)
    trigger = RecordingTrigger(fail_on={e1.id})
    engine.trigger = trigger

    result = await engine.tick(T0 + timedelta(hours=1))

    assert [e.id for e in trigger.fired] == [e1.id, e2.id]
    assert len(result.just_expired) == 2
    assert len(engine.ledger) == 0


@pytest.mark.asyncio
async def test_restart_round_trip(store):
    """Persist, then restore in a fresh engine before anything fires."""
    engine = await started_engine(store, settings=NO_COOLDOWN)
    e1 = await engine.report_event(T0)
    e2 = await engine.report_event(T0 + timedelta(minutes=5))
    await engine.shutdown()

    restarted = await started_engine(store, settings=NO_COOLDOWN, now=T0 + timedelta(minutes=10))

    restored = restarted.ledger.events
    assert [(e.id, e.fire_time, e.delay_hours_used) for e in restored] == [
        (e1.id, e1.fire_time, e1.delay_hours_used),
        (e2.id, e2.fire_time, e2.delay_hours_used),
    ]
    assert restored[0].remaining == timedelta(minutes=50)


@pytest.mark.asyncio
async def test_restart_drops_expired_without_fire(store, trigger):
    engine = await started_engine(store, settings=NO_COOLDOWN)
    await engine.report_event(T0)
    await engine.report_event(T0 + timedelta(minutes=45))
    await engine.shutdown()

    restarted = await started_engine(
        store, trigger, settings=NO_COOLDOWN, now=T0 + timedelta(hours=1, minutes=5)
    )
    await restarted.tick(T0 + timedelta(hours=1, minutes=5))

    assert len(restarted.ledger) == 1
    assert trigger.fired == []


@pytest.mark.asyncio
async def test_restart_restores_debounce_inside_window(store):
    engine = await started_engine(store)
    await engine.report_event(T0)

    inside = await started_engine(store, now=T0 + timedelta(minutes=10))
    assert inside.last_accepted_report_time == T0
    with pytest.raises(Debounced):
        await inside.report_event(T0 + timedelta(minutes=10))

    outside = await started_engine(store, now=T0 + timedelta(minutes=31))
    assert outside.last_accepted_report_time is None


@pytest.mark.asyncio
async def test_settings_change_is_not_retroactive(store):
    engine = await started_engine(store, settings=NO_COOLDOWN)
    first = await engine.report_event(T0)

    await engine.save_settings("3", "0")
    second = await engine.report_event(T0)

    assert first.fire_time == T0 + timedelta(hours=1)
    assert second.fire_time == T0 + timedelta(hours=3)
    assert json.loads(store.data[SETTINGS_KEY])["reminderDelayHours"] == 3


@pytest.mark.asyncio
async def test_invalid_settings_leave_engine_unchanged(store):
    engine = await started_engine(store)

    with pytest.raises(ValidationError):
        await engine.save_settings("1", "-1")

    assert engine.settings == HOUR_HALF_HOUR
    assert SETTINGS_KEY not in store.data


@pytest.mark.asyncio
async def test_saved_settings_survive_restart(store):
    engine = await started_engine(store)
    await engine.save_settings("4", "0")

    restarted = await started_engine(store)

    assert restarted.settings == Settings(reminder_hours=4, cooldown_minutes=0)


@pytest.mark.asyncio
async def test_works_without_persistence(trigger):
    """A store that always fails still leaves a usable engine."""
    engine = await started_engine(FailingStore(), trigger)

    event = await engine.report_event(T0)
    await engine.tick(event.fire_time)

    assert trigger.fired == [event]


@pytest.mark.asyncio
async def test_requires_init(store):
    engine = ReminderEngine(store)

    with pytest.raises(RuntimeError):
        await engine.report_event(T0)

    await engine.init(T0)
    await engine.shutdown()

    with pytest.raises(RuntimeError):
        await engine.tick(T0)


@pytest.mark.asyncio
async def test_out_of_range_settings_leave_engine_usable(store):
    """Huge settings are rejected, so later ticks and reports still work."""
    engine = await started_engine(store)

    for hours, minutes in [("10", "1e20"), ("1e8", "0")]:
        with pytest.raises(ValidationError):
            await engine.save_settings(hours, minutes)

    event = await engine.report_event(T0)
    result = await engine.tick(T0 + timedelta(minutes=1))

    assert engine.settings == HOUR_HALF_HOUR
    assert event.fire_time == T0 + timedelta(hours=1)
    assert result.just_expired == []


@pytest.mark.asyncio
async def test_init_survives_out_of_range_records(store):
    """Huge stored settings and event times are dropped instead of failing init."""
    t0 = to_epoch_ms(T0)
    hour = 3_600_000
    good = {
        "id": "good",
        "reportTime": t0 - hour,
        "fireTime": t0 + hour,
        "remaining": 2 * hour,
        "delayHoursUsed": 2,
    }
    far_future = dict(good, id="far-future", fireTime=10**20)
    store.data[SETTINGS_KEY] = json.dumps({"reminderDelayHours": 1e8, "cooldownMinutes": 1e20})
    store.data[EVENTS_KEY] = json.dumps([good, far_future])

    engine = await started_engine(store)

    assert engine.settings == HOUR_HALF_HOUR
    assert [e.id for e in engine.ledger.events] == ["good"]
    await engine.report_event(T0)
    assert len(engine.ledger.events) == 2
