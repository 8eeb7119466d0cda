import threading
from datetime import timedelta

from humidor.services.reading_cache import ReadingCache


def test_newest_reading_wins_regardless_of_completion_order(make_reading):
    cache = ReadingCache()
    newer = make_reading(70.0, 66.0, minutes=10)
    older = make_reading(68.0, 65.0, minutes=0)

    cache.update("s1", [newer])
    cache.update("s1", [older])

    assert cache.current("s1") == newer
    assert [r.timestamp for r in cache.history("s1")] == [older.timestamp, newer.timestamp]
    assert cache.get_stats()["stale_rejections"] == 1


def test_equal_timestamp_replaces_current(make_reading):
    cache = ReadingCache()
    cache.update("s1", [make_reading(68.0, 65.0, minutes=5)])
    corrected = make_reading(69.0, 65.0, minutes=5)
    cache.update("s1", [corrected])
    assert cache.current("s1") == corrected
    assert len(cache.history("s1")) == 1


def test_merge_deduplicates_by_timestamp(make_reading):
    cache = ReadingCache()
    cache.update("s1", [make_reading(68.0, 65.0, minutes=m) for m in (0, 10, 20)])
    cache.update("s1", [make_reading(68.0, 65.0, minutes=m) for m in (20, 30)])
    assert len(cache.history("s1")) == 4


def test_window_trims_relative_to_newest(make_reading):
    cache = ReadingCache()
    readings = [make_reading(68.0, 65.0, minutes=60 * h) for h in range(30)]
    cache.update("s1", readings, window=timedelta(hours=24))

    history = cache.history("s1")
    assert history[-1] == readings[-1]
    assert history[0] == readings[5]
    assert history[-1].timestamp - history[0].timestamp == timedelta(hours=24)


def test_history_since(make_reading):
    cache = ReadingCache()
    readings = [make_reading(68.0, 65.0, minutes=m) for m in (0, 10, 20)]
    cache.update("s1", readings)
    assert cache.history("s1", since=readings[1].timestamp) == readings[1:]


def test_unknown_sensor_and_removal(make_reading):
    cache = ReadingCache()
    assert cache.current("ghost") is None
    assert cache.history("ghost") == []

    cache.update("s1", [make_reading(68.0, 65.0)])
    cache.update("s2", [make_reading(68.0, 65.0, sensor_id="s2")])
    cache.remove("s1")
    assert cache.sensor_ids() == ["s2"]
    cache.clear()
    assert cache.sensor_ids() == []


def test_concurrent_writers_keep_the_newest(make_reading):
    cache = ReadingCache()
    readings = [make_reading(60.0 + m, 65.0, minutes=m) for m in range(50)]
    threads = [threading.Thread(target=cache.update, args=("s1", [r])) for r in reversed(readings)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert cache.current("s1") == readings[-1]
    assert len(cache.history("s1")) == 50


def test_window_is_remembered_for_later_updates(make_reading):
    cache = ReadingCache()
    cache.update("s1", [make_reading(68.0, 65.0, minutes=0)], window=timedelta(hours=1))
    for m in range(10, 181, 10):
        cache.update("s1", [make_reading(68.0, 65.0, minutes=m)])

    history = cache.history("s1")
    assert history[-1].timestamp - history[0].timestamp == timedelta(hours=1)


def test_default_window_applies_until_one_is_given(make_reading):
    cache = ReadingCache(default_window=timedelta(minutes=30))
    cache.update("s1", [make_reading(68.0, 65.0, minutes=m) for m in range(0, 121, 10)])
    assert len(cache.history("s1")) == 4

    cache.update("s1", [make_reading(68.0, 65.0, minutes=m) for m in range(0, 121, 10)], window=timedelta(hours=2))
    assert len(cache.history("s1")) == 13
