"""Tests for per-kind request tracking."""

from magic_writer.editor.activity import ActivityTracker, AiMode


class TestActivityTracker:
    def test_idle_by_default(self):
        tracker = ActivityTracker()
        assert not tracker.busy
        assert tracker.active_modes == frozenset()

    def test_modes_tracked_independently(self):
        tracker = ActivityTracker()
        grammar = tracker.start(AiMode.GRAMMAR, "text")
        suggest = tracker.start(AiMode.SUGGEST, "text")
        assert tracker.active_modes == {AiMode.GRAMMAR, AiMode.SUGGEST}

        assert tracker.finish(grammar)
        assert tracker.active_modes == {AiMode.SUGGEST}
        assert tracker.finish(suggest)
        assert not tracker.busy

    def test_newer_request_supersedes_older(self):
        tracker = ActivityTracker()
        old = tracker.start(AiMode.GRAMMAR, "a")
        new = tracker.start(AiMode.GRAMMAR, "ab")
        assert new.sequence > old.sequence
        assert tracker.finish(new)
        assert not tracker.finish(old)

    def test_other_mode_does_not_supersede(self):
        tracker = ActivityTracker()
        grammar = tracker.start(AiMode.GRAMMAR)
        tracker.start(AiMode.SUGGEST)
        assert tracker.finish(grammar)
        assert tracker.is_active(AiMode.SUGGEST)
