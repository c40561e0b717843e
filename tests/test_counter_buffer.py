import threading

from statsd_sdk.counter_buffer import CounterBuffer


def test_repeat_increment_coalesces_into_one_entry():
    buffer = CounterBuffer()
    buffer.add('foo', 1, 1.0)
    buffer.add('foo', 1, 1.0)

    entries = buffer.drain()
    assert len(entries) == 1
    assert entries[0].name == 'foo'
    assert entries[0].count == 2


def test_repeat_hit_adds_one_regardless_of_amount():
    buffer = CounterBuffer()
    buffer.add('foo', 5, 1.0)
    buffer.add('foo', 5, 1.0)
    buffer.add('foo', 10, 1.0)

    (entry,) = buffer.drain()
    assert entry.count == 7


def test_first_entry_keeps_its_sample_rate():
    buffer = CounterBuffer()
    buffer.add('foo', 1, 0.5)
    buffer.add('foo', 1, 0.25)

    (entry,) = buffer.drain()
    assert entry.sample_rate == 0.5


def test_distinct_names_get_distinct_entries():
    buffer = CounterBuffer()
    buffer.add('a', 1, 1.0)
    buffer.add('b', 3, 1.0)

    entries = {entry.name: entry.count for entry in buffer.drain()}
    assert entries == {'a': 1, 'b': 3}


def test_drain_empties_buffer():
    buffer = CounterBuffer()
    buffer.add('foo', 1, 1.0)
    assert len(buffer) == 1

    buffer.drain()
    assert len(buffer) == 0
    assert buffer.drain() == []


def test_entry_after_drain_is_seeded_again():
    buffer = CounterBuffer()
    buffer.add('foo', 3, 1.0)
    buffer.add('foo', 3, 1.0)
    buffer.drain()

    buffer.add('foo', 3, 1.0)
    (entry,) = buffer.drain()
    assert entry.count == 3


def test_concurrent_adds_keep_one_entry_per_name():
    buffer = CounterBuffer()
    drained = []
    start = threading.Event()

    def writer():
        start.wait()
        for _ in range(1000):
            buffer.add('hits', 1, 1.0)

    def drainer():
        start.wait()
        for _ in range(200):
            drained.extend(buffer.drain())

    threads = [threading.Thread(target=writer) for _ in range(8)]
    threads.append(threading.Thread(target=drainer))
    for thread in threads:
        thread.start()
    start.set()
    for thread in threads:
        thread.join()
    drained.extend(buffer.drain())

    assert sum(entry.count for entry in drained) == 8000
    assert all(entry.name == 'hits' for entry in drained)
