"""Tests for texflow.fields — the pending tab-stop queue"""
from texflow.fields import AdvanceSignal, FieldTracker
from texflow.types import TabStop


def stops(*positions):
    return [TabStop(p, p) for p in positions]


class TestShift:
    def test_only_stops_at_or_after_offset_move(self):
        tracker = FieldTracker([TabStop(2, 2), TabStop(5, 7), TabStop(10, 10)])
        tracker.shift(3, 5)
        assert tracker.stops == [TabStop(2, 2), TabStop(8, 10), TabStop(13, 13)]

    def test_shifts_are_additive(self):
        tracker = FieldTracker(stops(0, 4, 8, 12))
        tracker.shift(2, 4)
        tracker.shift(-1, 10)
        assert tracker.stops == stops(0, 6, 9, 13)

    def test_shift_order_does_not_matter(self):
        # second shift expressed in pre-edit coordinates
        tracker = FieldTracker(stops(0, 4, 8, 12))
        tracker.shift(-1, 8)
        tracker.shift(2, 4)
        assert tracker.stops == stops(0, 6, 9, 13)

    def test_negative_stops_dropped(self):
        tracker = FieldTracker(stops(1, 5))
        tracker.shift(-3, 0)
        assert tracker.stops == stops(2)

    def test_zero_diff_is_noop(self):
        tracker = FieldTracker(stops(3))
        tracker.shift(0, 0)
        assert tracker.stops == stops(3)


class TestAdvance:
    def test_pops_in_order(self):
        tracker = FieldTracker(stops(3, 7))
        assert tracker.advance(0) == TabStop(3, 3)
        assert tracker.advance(3) == TabStop(7, 7)
        assert tracker.advance(7) is None

    def test_skips_consumed_empty_stops(self):
        tracker = FieldTracker([TabStop(3, 3), TabStop(3, 3), TabStop(7, 7)])
        assert tracker.advance(3) == TabStop(7, 7)
        assert not tracker

    def test_selection_stop_at_caret_not_skipped(self):
        tracker = FieldTracker([TabStop(3, 5)])
        assert tracker.advance(3) == TabStop(3, 5)

    def test_empty(self):
        assert FieldTracker().advance(0) is None

    def test_peek_and_clear(self):
        tracker = FieldTracker(stops(4, 9))
        assert tracker.peek() == TabStop(4, 4)
        assert len(tracker) == 2
        tracker.clear()
        assert tracker.peek() is None
        assert len(tracker) == 0


class TestTabularOverride:
    TEXT = "\\begin{pmatrix}\na\n\\end{pmatrix} done"
    CELL = TEXT.index("\na") + 1

    def test_signals_separator_when_next_stop_is_outside(self):
        caret = self.CELL + 1
        tracker = FieldTracker(stops(len(self.TEXT)))
        assert tracker.advance(caret, self.TEXT) is AdvanceSignal.INSERT_SEPARATOR
        assert tracker.stops == stops(len(self.TEXT))

    def test_jumps_when_next_stop_is_inside(self):
        caret = self.CELL
        target = TabStop(caret + 1, caret + 1)
        tracker = FieldTracker([target])
        assert tracker.advance(caret, self.TEXT) == target

    def test_without_text_no_override(self):
        caret = self.CELL + 1
        tracker = FieldTracker(stops(len(self.TEXT)))
        assert tracker.advance(caret) == TabStop(len(self.TEXT), len(self.TEXT))
