"""Tests for logici_client.services.range_selector."""

import pytest

from logici_client.services.range_selector import Handle, RangeSelector, format_value


@pytest.fixture
def size_selector() -> RangeSelector:
    return RangeSelector(500, 20000, step=100)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults_to_full_bounds(self, size_selector: RangeSelector) -> None:
        assert size_selector.values == (500, 20000)

    def test_controlled_value_is_used(self) -> None:
        selector = RangeSelector(0, 100, step=5, value=(10, 60))
        assert selector.values == (10, 60)

    def test_rejects_non_positive_step(self) -> None:
        with pytest.raises(ValueError):
            RangeSelector(0, 100, step=0)

    def test_rejects_span_smaller_than_step(self) -> None:
        with pytest.raises(ValueError):
            RangeSelector(0, 5, step=10)


# ---------------------------------------------------------------------------
# Dragging
# ---------------------------------------------------------------------------


class TestDrag:
    def test_min_handle_dragged_past_max_stops_one_step_short(self, size_selector: RangeSelector) -> None:
        drag = size_selector.begin_drag(Handle.MIN, pointer_x=0, track_width=100)
        drag.move(150)
        assert size_selector.values == (19900, 20000)

    def test_max_handle_dragged_past_min_stops_one_step_above(self, size_selector: RangeSelector) -> None:
        drag = size_selector.begin_drag(Handle.MAX, pointer_x=100, track_width=100)
        drag.move(-500)
        assert size_selector.values == (500, 600)

    def test_values_are_quantized_to_step(self) -> None:
        selector = RangeSelector(0, 100, step=10)
        drag = selector.begin_drag("min", pointer_x=0, track_width=200)
        drag.move(27)  # 13.5 units -> rounds to 10
        assert selector.values == (10, 100)

    def test_values_never_leave_bounds(self) -> None:
        selector = RangeSelector(10, 100, step=1, value=(40, 60))
        drag = selector.begin_drag(Handle.MIN, pointer_x=50, track_width=90)
        drag.move(-1000)
        assert selector.values == (10, 60)

    def test_on_change_called_with_committed_values(self) -> None:
        seen = []
        selector = RangeSelector(0, 100, step=1, on_change=lambda low, high: seen.append((low, high)))
        selector.begin_drag(Handle.MAX, 100, 100).move(75)
        assert seen == [(0, 75)]

    def test_release_detaches_session(self, size_selector: RangeSelector) -> None:
        drag = size_selector.begin_drag(Handle.MIN, 0, 100)
        drag.release()
        assert not size_selector.dragging
        assert drag.move(50) is None
        assert size_selector.values == (500, 20000)

    def test_new_drag_releases_previous_one(self, size_selector: RangeSelector) -> None:
        first = size_selector.begin_drag(Handle.MIN, 0, 100)
        second = size_selector.begin_drag(Handle.MAX, 100, 100)
        assert not first.active
        assert second.active
        assert first.move(50) is None

    def test_zero_width_track_is_ignored(self, size_selector: RangeSelector) -> None:
        drag = size_selector.begin_drag(Handle.MIN, 0, 0)
        assert drag.move(10) is None
        assert size_selector.values == (500, 20000)


# ---------------------------------------------------------------------------
# External values
# ---------------------------------------------------------------------------


class TestSetValue:
    def test_external_value_overwrites_state(self, size_selector: RangeSelector) -> None:
        size_selector.set_value((1000, 5000))
        assert size_selector.values == (1000, 5000)

    def test_external_value_ignored_during_drag(self, size_selector: RangeSelector) -> None:
        drag = size_selector.begin_drag(Handle.MIN, 0, 100)
        size_selector.set_value((1000, 5000))
        assert size_selector.values == (500, 20000)
        drag.release()
        size_selector.set_value((1000, 5000))
        assert size_selector.values == (1000, 5000)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


class TestRendering:
    def test_percentage(self) -> None:
        selector = RangeSelector(0, 200, step=1)
        assert selector.percentage(50) == 25

    @pytest.mark.parametrize(
        "value, expected",
        [(500, "500"), (1000, "1k"), (12500, "12.5k"), (20000, "20k")],
    )
    def test_format_value(self, value, expected) -> None:
        assert format_value(value) == expected
