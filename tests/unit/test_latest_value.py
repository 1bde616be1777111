import threading

from barometer_service.inputs.latest_value import LatestValueStore


def test_default_is_zero():
    store = LatestValueStore()
    assert store.get() == 0.0
    assert store.updated_at is None


def test_set_then_get_returns_value():
    store = LatestValueStore()
    store.set(1013.25)
    assert store.get() == 1013.25


def test_last_write_wins():
    store = LatestValueStore()
    store.set(1000.0)
    store.set(1001.5)
    store.set(999.0)
    assert store.get() == 999.0


def test_set_records_update_time():
    store = LatestValueStore()
    store.set(1.0)
    first = store.updated_at
    store.set(2.0)
    assert first is not None
    assert store.updated_at >= first


def test_ints_are_stored_as_float():
    store = LatestValueStore()
    store.set(1013)
    assert isinstance(store.get(), float)


def test_concurrent_writers_leave_one_of_the_written_values():
    store = LatestValueStore()
    values = [float(v) for v in range(900, 1100)]

    def writer(chunk):
        for v in chunk:
            store.set(v)

    threads = [threading.Thread(target=writer, args=(values[i::4],)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get() in values
