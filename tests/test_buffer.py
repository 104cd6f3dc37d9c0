from __future__ import annotations

import pytest

from scry.core.buffer import LogState


def _state(lines: list[str], capacity: int = 2000) -> LogState:
    state = LogState(capacity)
    for line in lines:
        state.append(line)
    return state


def test_append_beyond_capacity_evicts_oldest() -> None:
    state = _state([f"line {i}" for i in range(2001)])

    assert len(state) == 2000
    assert state.lines[0] == "line 1"
    assert state.lines[-1] == "line 2000"
    assert state.evicted == 1


def test_length_never_exceeds_capacity() -> None:
    state = LogState(3)
    for i in range(10):
        state.append(str(i))
        assert len(state) <= 3
    assert list(state.lines) == ["7", "8", "9"]


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        LogState(0)


def test_select_derives_token_and_rescans_buffer() -> None:
    state = _state(["a=1", "b=2", "a=1 extra"])

    state.select(0)

    assert state.selected == 0
    assert state.filter_token == "1"
    assert state.matching_indices == [0, 2]
    assert state.display_count() == 2
    assert state.display_window() == [(0, "a=1"), (2, "a=1 extra")]


def test_select_prefers_quoted_value() -> None:
    state = _state(['level=info msg="connection refused"', "connection refused again"])

    state.select(0)

    assert state.filter_token == "connection refused"
    assert state.matching_indices == [0, 1]


def test_select_out_of_range_is_ignored() -> None:
    state = _state(["alpha", "beta"])
    state.scroll_offset = 1

    state.select(5)
    state.select(-1)

    assert state.selected is None
    assert state.filter_token is None
    assert state.scroll_offset == 1


def test_select_resets_scroll_offset() -> None:
    state = _state([f"word{i}" for i in range(20)])
    state.scroll_down(5)

    state.select(3)

    assert state.scroll_offset == 0


def test_select_without_token_clears_filter() -> None:
    state = _state(["alpha", "!", "alpha again"])
    state.select(0)
    assert state.is_filtering

    state.select(1)

    assert state.selected == 1
    assert state.filter_token is None
    assert state.matching_indices == []
    assert state.display_count() == 3


def test_clear_selection_keeps_scroll() -> None:
    state = _state([f"row x{i}" for i in range(10)])
    state.select(2)
    assert state.filter_token == "row"
    state.scroll_down(4)

    state.clear_selection()

    assert state.selected is None
    assert state.filter_token is None
    assert state.matching_indices == []
    assert state.display_count() == 10
    assert state.scroll_offset == 4


def test_append_extends_matches_while_filtering() -> None:
    state = _state(['msg="disk full"', "ok"])
    state.select(0)

    state.append("warning: disk full on /var")
    state.append("unrelated")

    assert state.matching_indices == [0, 2]


class TestEviction:
    """Index bookkeeping when the oldest line is dropped."""

    def test_matching_indices_are_renumbered(self) -> None:
        state = _state(["a=1", "b=2", "a=1 x"], capacity=3)
        state.select(0)
        assert state.matching_indices == [0, 2]

        state.append("c=3")

        assert list(state.lines) == ["b=2", "a=1 x", "c=3"]
        assert state.matching_indices == [1]

    def test_selection_at_zero_is_cleared(self) -> None:
        state = _state(["a=1", "b=2", "c=3"], capacity=3)
        state.select(0)

        state.append("d=4")

        assert state.selected is None

    def test_selection_is_decremented(self) -> None:
        state = _state(["a=1", "b=2", "c=3"], capacity=3)
        state.select(2)

        state.append("d=4")

        assert state.selected == 1
        assert state.lines[state.selected] == "c=3"

    def test_new_matching_line_is_tracked_after_eviction(self) -> None:
        state = _state(["a=1", "b=2", "a=1 x"], capacity=3)
        state.select(2)

        state.append("a=1 again")

        assert state.matching_indices == [1, 2]
        assert all(state.filter_token in state.lines[i] for i in state.matching_indices)

    def test_scroll_offset_is_decremented(self) -> None:
        state = _state([f"l{i}" for i in range(5)], capacity=5)
        state.scroll_down(3)

        state.append("l5")

        assert state.scroll_offset == 2


class TestScroll:
    """Scroll offsets stay within the display sequence."""

    def test_scroll_down_clamps_to_last_line(self) -> None:
        state = _state([f"l{i}" for i in range(5)])

        state.scroll_down(100)

        assert state.scroll_offset == 4

    def test_scroll_up_saturates_at_zero(self) -> None:
        state = _state([f"l{i}" for i in range(5)])
        state.scroll_down(2)

        state.scroll_up(10)

        assert state.scroll_offset == 0

    def test_scroll_on_empty_buffer_stays_at_zero(self) -> None:
        state = LogState()

        state.scroll_down(10)
        state.scroll_up(3)

        assert state.scroll_offset == 0

    def test_scroll_uses_filtered_count(self) -> None:
        state = _state(["a=1", "b=2", "a=1 x", "c=3", "d=4"])
        state.select(0)

        state.scroll_down(10)

        assert state.scroll_offset == 1

    def test_scroll_to_end_and_start(self) -> None:
        state = _state([f"l{i}" for i in range(7)])

        state.scroll_to_end()
        assert state.scroll_offset == 6

        state.scroll_to_start()
        assert state.scroll_offset == 0

    def test_offset_invariant_over_mixed_operations(self) -> None:
        state = LogState(8)
        for i in range(30):
            state.append(f"item{i % 3} value={i % 4}")
            if i % 5 == 0:
                state.select(len(state) - 1)
            if i % 7 == 0:
                state.clear_selection()
            state.scroll_down(3)
            assert 0 <= state.scroll_offset < max(state.display_count(), 1)


class TestSelectionMovement:
    """Arrow-key selection movement re-derives the filter and follows it."""

    def test_move_selection_follows_new_line(self) -> None:
        state = _state(["x=1", "x=2", "x=1", "x=2", "x=1"])
        state.select(0)

        assert state.move_selection(1)

        assert state.selected == 1
        assert state.filter_token == "2"
        assert state.matching_indices == [1, 3]
        assert state.scroll_offset == 0

    def test_move_selection_into_later_match(self) -> None:
        state = _state(["x=1", "x=2", "x=1", "x=2", "x=1"])
        state.select(1)

        assert state.move_selection(2)

        assert state.selected == 3
        assert state.scroll_offset == 1

    def test_move_selection_without_token_follows_raw_index(self) -> None:
        state = _state(["alpha", "beta", "!", "gamma"])
        state.select(1)

        state.move_selection(1)

        assert state.filter_token is None
        assert state.scroll_offset == 2

    def test_move_selection_stops_at_edges(self) -> None:
        state = _state(["a=1", "b=2"])
        state.select(0)

        assert not state.move_selection(-1)
        assert state.selected == 0

    def test_move_without_selection_does_nothing(self) -> None:
        state = _state(["a=1"])
        assert not state.move_selection(1)


def test_display_position_and_index_at() -> None:
    state = _state(["a=1", "b=2", "a=1 x"])
    state.select(0)

    assert state.display_position(2) == 1
    assert state.display_position(1) is None
    assert state.index_at(1) == 2
    assert state.index_at(2) is None


def test_highlight_spans_cover_each_occurrence() -> None:
    state = _state(["id=ab", "ab-ab ab"])
    state.select(0)

    assert state.highlight_spans("ab-ab ab") == [(0, 2), (3, 5), (6, 8)]
    assert state.is_match(1)


def test_get_last_returns_tail() -> None:
    state = _state([str(i) for i in range(10)])

    assert state.get_last(3) == ["7", "8", "9"]
    assert state.get_last(0) == []
    assert state.snapshot() == [str(i) for i in range(10)]
