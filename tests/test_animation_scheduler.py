import pytest

from nanosprite.core.animation_scheduler import AnimationCursor, AnimationScheduler
from nanosprite.core.errors import SchedulerMisuse


def record(events):
    return lambda index: events.append(index)


def test_advances_once_per_interval_with_wraparound(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(12, 8, lambda index: advances.append((index, timestamp[0])))

    timestamp = [0]
    for t in range(0, 2001, 10):
        timestamp[0] = t
        tick_source.tick(t)

    indices = [index for index, _ in advances]
    assert indices == [(i + 1) % 8 for i in range(len(indices))]
    times = [t for _, t in advances]
    assert all(b - a >= 1000 / 12 for a, b in zip(times, times[1:]))
    # baseline at t=0, then every 90 ms of 10 ms ticks
    assert len(advances) == 22


def test_slow_ticks_never_skip_frames(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(30, 8, record(advances))
    tick_source.run(0, 5000, 500)
    assert advances == [(i + 1) % 8 for i in range(10)]


def test_no_advance_before_interval_elapses(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(10, 8, record(advances))
    tick_source.tick(1000)
    tick_source.tick(1099)
    assert advances == []
    tick_source.tick(1100)
    assert advances == [1]
    assert scheduler.cursor.last_advance_timestamp == 1100


def test_stop_is_idempotent_and_cancels_pending_tick(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(12, 8, record(advances))
    tick_source.run(0, 200, 100)
    index = scheduler.current_index

    scheduler.stop()
    scheduler.stop()
    assert not scheduler.running
    assert tick_source.pending == {}
    tick_source.run(300, 2000, 100)
    assert scheduler.current_index == index
    assert advances == [1, 2]


def test_stale_callback_after_stop_does_nothing(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(12, 8, record(advances))
    stale = list(tick_source.pending.values())[0]
    scheduler.stop()
    stale(0)
    stale(10_000)
    assert advances == []
    assert tick_source.pending == {}


def test_stop_from_idle_is_safe(tick_source):
    scheduler = AnimationScheduler(tick_source)
    scheduler.stop()
    assert scheduler.current_index == 0


def test_start_while_running_keeps_existing_clock(tick_source):
    scheduler = AnimationScheduler(tick_source)
    scheduler.start(12, 8)
    tick_source.tick(0)
    scheduler.start(60, 4)
    assert scheduler.fps == 12
    assert scheduler.frame_count == 8
    assert len(tick_source.pending) == 1


def test_set_rate_keeps_current_index(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advances = []
    scheduler.start(10, 8, record(advances))
    tick_source.run(0, 300, 100)
    assert scheduler.current_index == 3

    scheduler.set_rate(2)
    assert scheduler.current_index == 3
    tick_source.run(400, 700, 100)
    assert scheduler.current_index == 3
    tick_source.tick(800)
    assert scheduler.current_index == 4


@pytest.mark.parametrize("fps", [0, -1, None])
def test_non_positive_rate_is_misuse(tick_source, fps):
    scheduler = AnimationScheduler(tick_source)
    with pytest.raises(SchedulerMisuse):
        scheduler.start(fps, 8)
    assert not scheduler.running
    with pytest.raises(SchedulerMisuse):
        scheduler.set_rate(fps)


def test_stop_inside_callback_ends_the_loop(tick_source):
    scheduler = AnimationScheduler(tick_source)
    scheduler.start(10, 8, lambda index: scheduler.stop())
    tick_source.run(0, 500, 100)
    assert scheduler.current_index == 1
    assert tick_source.pending == {}


def test_resume_continues_from_current_index(tick_source):
    scheduler = AnimationScheduler(tick_source)
    scheduler.start(10, 8)
    tick_source.run(0, 200, 100)
    scheduler.stop()
    scheduler.start(10, 8)
    assert scheduler.current_index == 2
    scheduler.stop()
    scheduler.start(10, 4)
    assert scheduler.current_index == 0


def test_reset_rewinds_shared_cursor(tick_source):
    cursor = AnimationCursor(current_index=5, last_advance_timestamp=123)
    scheduler = AnimationScheduler(tick_source, cursor)
    scheduler.reset(8)
    assert cursor.current_index == 0
    assert cursor.last_advance_timestamp is None


def test_failing_callback_does_not_stall_the_clock(tick_source):
    scheduler = AnimationScheduler(tick_source)
    advanced = []

    def on_advance(index):
        advanced.append(index)
        if index == 1:
            raise RuntimeError("repaint failed")

    scheduler.start(10, 8, on_advance)
    tick_source.tick(0)
    with pytest.raises(RuntimeError):
        tick_source.tick(100)
    assert scheduler.running
    assert len(tick_source.pending) == 1

    tick_source.tick(200)
    tick_source.tick(300)
    assert advanced == [1, 2, 3]
    assert scheduler.current_index == 3
