"""
Unit tests for SourceQueue: dedup, filtering, looping and live edits.
"""

import pytest
from structlog.testing import capture_logs

from relaycast.streaming.source_queue import SourceQueue, kind_breakdown
from relaycast.streaming.sources import classify

PLACEHOLDER = "tmp/placeholder.mp4"


@pytest.fixture
def clips(tmp_path):
    paths = []
    for name in ("a.mp4", "b.mp4", "c.mp4"):
        path = tmp_path / name
        path.write_bytes(b"\x00")
        paths.append(str(path))
    return paths


class TestAdd:
    def test_duplicate_locator_is_added_once(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(clips[0])
        queue.add(clips[0])

        assert len(queue) == 1

    def test_duplicates_within_one_call(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        added = queue.add(clips[0], clips[0])

        assert len(added) == 1
        assert len(queue) == 1

    def test_missing_file_is_dropped(self, clips, tmp_path):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(clips[0], str(tmp_path / "nope.mp4"))

        assert [source.locator for source in queue.items()] == [clips[0]]

    def test_nothing_valid_warns(self, tmp_path):
        queue = SourceQueue(PLACEHOLDER)
        with capture_logs() as logs:
            added = queue.add(str(tmp_path / "nope.mp4"))

        assert added == []
        assert len(queue) == 0
        assert any(entry["event"] == "queue_add_nothing_valid" for entry in logs)

    def test_logs_kind_breakdown(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        with capture_logs() as logs:
            queue.add(clips[0], "https://example.com/a.mp4", "https://example.com/live.m3u8")

        entry = next(e for e in logs if e["event"] == "queue_add")
        assert entry["added"] == 3
        assert entry["breakdown"] == "(1 file(s), 1 URL(s), 1 stream(s))"

    def test_unusable_path_is_dropped(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        added = queue.add("a" * 5000, clips[0])

        assert [source.locator for source in added] == [clips[0]]
        assert len(queue) == 1

    def test_contains(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(clips[0])

        assert clips[0] in queue
        assert clips[1] not in queue


class TestRemoveAndClear:
    def test_remove_in_range(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(*clips)

        assert queue.remove(1) is True
        assert [s.locator for s in queue.items()] == [clips[0], clips[2]]

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_remove_out_of_range_is_reported(self, clips, index):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(*clips)

        assert queue.remove(index) is False
        assert len(queue) == 3

    def test_clear_empties_both_lists(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(*clips)
        queue.begin_cycle()

        queue.clear()

        assert len(queue) == 0
        assert queue.pending() == ()
        assert queue.next() == PLACEHOLDER


class TestNext:
    def test_loop_repeats_in_order(self, clips):
        queue = SourceQueue(PLACEHOLDER, loop=True)
        a, b = clips[0], clips[1]
        queue.add(a, b)

        assert [queue.next() for _ in range(4)] == [a, b, a, b]

    def test_no_loop_falls_back_to_placeholder(self, clips):
        queue = SourceQueue(PLACEHOLDER, loop=False)
        queue.add(clips[0])
        queue.begin_cycle()

        assert queue.next() == clips[0]
        assert queue.next() == PLACEHOLDER
        assert queue.next() == PLACEHOLDER

    def test_empty_queue_with_loop_yields_placeholder(self):
        queue = SourceQueue(PLACEHOLDER, loop=True)

        assert queue.next() == PLACEHOLDER

    def test_played_counter_resets_on_refill(self, clips):
        queue = SourceQueue(PLACEHOLDER, loop=True)
        queue.add(clips[0], clips[1])

        queue.next()
        queue.next()
        assert queue.total_played == 2

        queue.next()  # refill
        assert queue.total_played == 1

    def test_removal_does_not_touch_current_cycle(self, clips):
        a, b = clips[0], clips[1]
        queue = SourceQueue(PLACEHOLDER, loop=True)
        queue.add(a, b)
        queue.begin_cycle()

        assert queue.next() == a
        assert queue.remove(0) is True

        # Remaining snapshot still holds B
        assert [s.locator for s in queue.pending()] == [b]
        assert queue.next() == b
        # Next refill reflects the persistent queue without A
        assert queue.next() == b
        assert queue.next() == b

    def test_additions_appear_at_next_refill(self, clips):
        a, b, c = clips
        queue = SourceQueue(PLACEHOLDER, loop=True)
        queue.add(a, b)
        queue.begin_cycle()

        assert queue.next() == a
        queue.add(c)
        assert queue.next() == b
        assert [queue.next() for _ in range(3)] == [a, b, c]

    def test_begin_cycle_replaces_leftovers(self, clips):
        queue = SourceQueue(PLACEHOLDER)
        queue.add(clips[0], clips[1])
        queue.begin_cycle()
        queue.begin_cycle()

        assert len(queue.pending()) == 2


def test_kind_breakdown_empty():
    assert kind_breakdown([]) == ""


def test_kind_breakdown_skips_missing_kinds():
    sources = [classify("https://example.com/a.mp4"), classify("https://example.com/b.mp4")]
    assert kind_breakdown(sources) == "(2 URL(s))"
