import logging

import pytest

from grid_layout import (
    ColumnSpan,
    RowBand,
    RowSpan,
    column_for_tracks,
    compute_row_bands,
    compute_row_sizes,
    format_row_template,
    row_for_orphan,
    row_for_slot,
    row_size_for_slot,
)
from layout_config import GridConfig
from layout_errors import InvalidTrackReference, UnanchoredOrphan
from schedule_model import BreakSlot, DayType, Item, OrphanSlot, SessionsSlot

CONFIG = GridConfig()


def make_item(item_id: str, tracks: list[str], duration: int = 30, time=None) -> Item:
    return Item(
        id=item_id,
        title=item_id.title(),
        duration=duration,
        tracks=tuple(tracks),
        time=time,
    )


def make_sessions(time: int, duration: int, *items: Item) -> SessionsSlot:
    return SessionsSlot(time=time, duration=duration, items=items)


def make_orphan(time: int, duration: int = 15, tracks=("A",)) -> OrphanSlot:
    return OrphanSlot(item=make_item("orphan", list(tracks), duration, time=time))


# --- Grid metrics ---


def test_talks_day_session_rows() -> None:
    assert row_size_for_slot(make_sessions(600, 30), DayType.TALKS, CONFIG) == 6
    assert row_size_for_slot(make_sessions(600, 60), DayType.TALKS, CONFIG) == 12


def test_tutorials_day_is_half_density() -> None:
    assert row_size_for_slot(make_sessions(600, 60), DayType.TUTORIALS, CONFIG) == 6


def test_break_rows_round_up() -> None:
    assert row_size_for_slot(BreakSlot(600, 15, "Coffee"), DayType.TALKS, CONFIG) == 2
    assert row_size_for_slot(BreakSlot(600, 60, "Lunch"), DayType.TUTORIALS, CONFIG) == 6


def test_orphan_owns_no_rows() -> None:
    assert row_size_for_slot(make_orphan(615), DayType.TALKS, CONFIG) == 0


def test_row_size_is_exact_for_uneven_durations() -> None:
    # 6 * 70 / 30 is exactly 14; no spurious extra row from float error.
    assert row_size_for_slot(make_sessions(600, 70), DayType.TALKS, CONFIG) == 14


def test_row_sizes_follow_config() -> None:
    config = GridConfig(session_rows=4, base_duration=15)
    assert row_size_for_slot(make_sessions(600, 30), DayType.TALKS, config) == 8


def test_row_template_drops_empty_bands() -> None:
    slots = [make_sessions(600, 30), make_orphan(640), BreakSlot(650, 15, "Coffee")]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    assert row_sizes == [6, 0, 2]

    bands = compute_row_bands(row_sizes, CONFIG)
    assert bands == [RowBand(2, 25), RowBand(6, 25), RowBand(2, 25)]
    assert format_row_template(bands) == (
        "repeat(2, 25px) repeat(6, 25px) repeat(2, 25px)"
    )


# --- Row mapper ---


def test_full_slot_spans_its_row_size() -> None:
    row_sizes = [6, 2, 12]
    assert row_for_slot(0, row_sizes, 30, 30, CONFIG) == RowSpan(3, 9)
    assert row_for_slot(1, row_sizes, 15, 15, CONFIG) == RowSpan(9, 11)
    assert row_for_slot(2, row_sizes, 60, 60, CONFIG) == RowSpan(11, 23)


def test_short_item_takes_proportional_rows() -> None:
    row_sizes = [6, 2, 12]
    assert row_for_slot(2, row_sizes, 45, 60, CONFIG) == RowSpan(11, 20)
    assert row_for_slot(2, row_sizes, 20, 60, CONFIG) == RowSpan(11, 15)


def test_tiny_item_still_gets_one_row() -> None:
    span = row_for_slot(0, [12], 1, 60, CONFIG)
    assert span.end - span.start == 1


# --- Column mapper ---


def test_tracks_out_of_order_span_both() -> None:
    assert column_for_tracks(["B", "A"], ["A", "B", "C"]) == ColumnSpan(2, 4)


def test_single_track_column() -> None:
    assert column_for_tracks(["C"], ["A", "B", "C"]) == ColumnSpan(4, 5)


def test_duplicate_tracks_count_once() -> None:
    assert column_for_tracks(["A", "A"], ["A", "B"]) == ColumnSpan(2, 3)


def test_track_indexes_sort_numerically() -> None:
    tracks = [f"Room {n}" for n in range(1, 12)]
    span = column_for_tracks(["Room 11", "Room 10"], tracks)
    assert span == ColumnSpan(11, 13)


def test_non_adjacent_tracks_are_reported(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="grid_layout"):
        span = column_for_tracks(["A", "C"], ["A", "B", "C"])
    assert span == ColumnSpan(2, 4)
    assert "not adjacent" in caplog.text


def test_unknown_track_raises() -> None:
    with pytest.raises(InvalidTrackReference) as excinfo:
        column_for_tracks(["D"], ["A", "B", "C"])
    assert excinfo.value.details["tracks"] == ["D"]


def test_item_without_tracks_raises() -> None:
    with pytest.raises(InvalidTrackReference):
        column_for_tracks([], ["A"])


# --- Orphan interpolation ---


def test_orphan_between_two_half_hour_slots() -> None:
    slots = [make_sessions(600, 30), make_orphan(630), make_sessions(660, 30)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    assert row_sizes == [6, 0, 6]
    # 30 minutes past the slot before maps to all 6 of its rows; 30 minutes
    # before the slot after maps to 6 rows counted from that slot's offset.
    assert row_for_orphan(630, row_sizes, slots, CONFIG) == RowSpan(2 + 0 + 6, 2 + 6 + 6)


def test_orphan_inside_slot_before() -> None:
    slots = [make_sessions(600, 60), make_orphan(615), make_sessions(660, 30)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    span = row_for_orphan(615, row_sizes, slots, CONFIG)
    # floor(12 * 15 / 60) = 3 rows into the first band.
    assert span.start == 2 + 3
    # floor(6 * 45 / 30) = 9 rows past the 12 rows before the slot after.
    assert span.end == 2 + 12 + 9


def test_orphan_ignores_other_orphans_as_anchors() -> None:
    slots = [
        make_sessions(600, 30),
        make_orphan(620),
        make_orphan(635),
        make_sessions(660, 30),
    ]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    span = row_for_orphan(635, row_sizes, slots, CONFIG)
    assert span.start == 2 + 7
    assert span.end == 2 + 6 + 5


def test_orphan_in_gap_between_slots_keeps_one_row() -> None:
    # 10:00-10:30, then nothing until 11:30.
    slots = [make_sessions(600, 30), make_orphan(670), make_sessions(690, 30)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    assert row_sizes == [6, 0, 6]
    # start = 2 + floor(6 * 70 / 30) = 16, end = 2 + 6 + floor(6 * 20 / 30) = 12
    assert row_for_orphan(670, row_sizes, slots, CONFIG) == RowSpan(16, 17)
    # start = 2 + 12 = 14 meets end = 2 + 6 + 6 = 14
    assert row_for_orphan(660, row_sizes, slots, CONFIG) == RowSpan(14, 15)


def test_orphan_span_is_never_empty() -> None:
    slots = [make_sessions(600, 30), make_orphan(631), make_sessions(690, 30)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    for t in range(631, 690):
        span = row_for_orphan(t, row_sizes, slots, CONFIG)
        assert span.end > span.start


def test_orphan_start_is_monotonic_in_time() -> None:
    slots = [make_sessions(600, 60), make_orphan(601), make_sessions(660, 60)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, CONFIG)
    spans = [row_for_orphan(t, row_sizes, slots, CONFIG) for t in range(601, 660)]
    starts = [span.start for span in spans]
    ends = [span.end for span in spans]
    assert starts == sorted(starts)
    # The end is measured back from the slot after, so it never grows.
    assert ends == sorted(ends, reverse=True)


def test_orphan_before_first_slot_raises() -> None:
    slots = [make_orphan(590), make_sessions(600, 30)]
    with pytest.raises(UnanchoredOrphan) as excinfo:
        row_for_orphan(590, [0, 6], slots, CONFIG)
    assert excinfo.value.details["missing"] == "preceding"


def test_orphan_after_last_slot_raises() -> None:
    slots = [make_sessions(600, 30), make_orphan(640)]
    with pytest.raises(UnanchoredOrphan) as excinfo:
        row_for_orphan(640, [6, 0], slots, CONFIG)
    assert excinfo.value.details["missing"] == "following"


def test_orphan_at_slot_start_is_not_anchored_to_that_slot() -> None:
    slots = [make_orphan(600), make_sessions(600, 30), make_sessions(630, 30)]
    with pytest.raises(UnanchoredOrphan):
        row_for_orphan(600, [0, 6, 6], slots, CONFIG)


def test_clamp_policy_pins_missing_edges() -> None:
    config = GridConfig(orphan_policy="clamp")
    slots = [make_orphan(590), make_sessions(600, 30), make_sessions(630, 30)]
    row_sizes = compute_row_sizes(slots, DayType.TALKS, config)

    early = row_for_orphan(590, row_sizes, slots, config)
    assert early.start == 3
    assert early.end == 2 + 0 + 2

    late = row_for_orphan(645, row_sizes, slots, config)
    assert late.start == 2 + 6 + 3
    assert late.end == 3 + 12
