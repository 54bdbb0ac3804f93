"""Grid placement for multi-track schedules.

Rows are time and columns are tracks. Every slot gets a whole number of
grid rows proportional to its duration; items shorter than their slot get a
proportional share of it, and orphan items (which start between slot
boundaries) are interpolated between the bands of their neighbours.

Coordinates are 1-based with an exclusive end, the way CSS grid lines are
numbered. Column 1 holds the time labels and the first ``heading_rows``
rows hold the track headings.
"""

from __future__ import annotations

__all__ = [
    "ColumnSpan",
    "GridCoordinate",
    "PlacedElement",
    "RowBand",
    "RowSpan",
    "ScheduleLayout",
    "check_schedule",
    "column_for_tracks",
    "compute_row_bands",
    "compute_row_sizes",
    "format_row_template",
    "layout_schedule",
    "row_for_orphan",
    "row_for_slot",
    "row_size_for_slot",
]

import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

from layout_config import GridConfig
from layout_errors import (
    InvalidTrackReference,
    NonPositiveDuration,
    UnanchoredOrphan,
    UnorderedSlots,
)
from schedule_model import (
    BreakSlot,
    DayType,
    OrphanSlot,
    Schedule,
    SessionsSlot,
    Slot,
    minutes_to_clock,
)

logger = logging.getLogger(__name__)

# Column 1 is the time label column; css grid lines start at 1.
TIME_COLUMN = 1
FIRST_TRACK_COLUMN = 2


@dataclass(frozen=True)
class RowSpan:
    start: int
    end: int


@dataclass(frozen=True)
class ColumnSpan:
    start: int
    end: int


@dataclass(frozen=True)
class GridCoordinate:
    row_start: int
    row_end: int
    column_start: int
    column_end: int

    @classmethod
    def from_spans(cls, row: RowSpan, column: ColumnSpan) -> GridCoordinate:
        return cls(row.start, row.end, column.start, column.end)

    @property
    def grid_row(self) -> str:
        return f"{self.row_start} / {self.row_end}"

    @property
    def grid_column(self) -> str:
        return f"{self.column_start} / {self.column_end}"


@dataclass(frozen=True)
class RowBand:
    count: int
    height: int

    def css(self) -> str:
        return f"repeat({self.count}, {self.height}px)"


@dataclass(frozen=True)
class PlacedElement:
    """One positioned box: a heading, time label, break, item or marker."""

    kind: str
    coordinate: GridCoordinate
    title: str = ""
    time: int | None = None
    duration: int | None = None
    slot_index: int | None = None
    item_id: str | None = None
    tracks: tuple[str, ...] = ()
    speakers: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "title": self.title,
            "time": minutes_to_clock(self.time) if self.time is not None else None,
            "duration": self.duration,
            "slot_index": self.slot_index,
            "item_id": self.item_id,
            "tracks": list(self.tracks),
            "speakers": list(self.speakers),
            "grid_row": self.coordinate.grid_row,
            "grid_column": self.coordinate.grid_column,
        }


@dataclass(frozen=True)
class ScheduleLayout:
    name: str
    day_type: DayType
    tracks: tuple[str, ...]
    row_sizes: tuple[int, ...]
    row_bands: tuple[RowBand, ...]
    elements: tuple[PlacedElement, ...]
    time_column_width: str

    @property
    def total_rows(self) -> int:
        return sum(band.count for band in self.row_bands)

    @property
    def grid_template_rows(self) -> str:
        return format_row_template(self.row_bands)

    @property
    def grid_template_columns(self) -> str:
        return f"{self.time_column_width} repeat({len(self.tracks)}, 1fr)"

    def elements_of_kind(self, kind: str) -> list[PlacedElement]:
        return [element for element in self.elements if element.kind == kind]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "day_type": self.day_type.value,
            "tracks": list(self.tracks),
            "row_sizes": list(self.row_sizes),
            "grid_template_rows": self.grid_template_rows,
            "grid_template_columns": self.grid_template_columns,
            "elements": [element.to_dict() for element in self.elements],
        }


def _ceil_ratio(numerator, denominator) -> int:
    return math.ceil(Fraction(numerator) / Fraction(denominator))


def _floor_ratio(numerator, denominator) -> int:
    return math.floor(Fraction(numerator) / Fraction(denominator))


def row_size_for_slot(slot: Slot, day_type: DayType, config: GridConfig) -> int:
    if isinstance(slot, BreakSlot):
        return _ceil_ratio(config.break_rows * slot.duration, config.base_duration)
    if isinstance(slot, OrphanSlot):
        return 0
    if isinstance(slot, SessionsSlot):
        unit = (
            config.session_rows_tutorials
            if day_type is DayType.TUTORIALS
            else config.session_rows
        )
        return _ceil_ratio(unit * slot.duration, config.base_duration)
    raise TypeError(f"Unsupported slot type: {type(slot).__name__}")


def compute_row_sizes(
    slots: Sequence[Slot], day_type: DayType, config: GridConfig
) -> list[int]:
    return [row_size_for_slot(slot, day_type, config) for slot in slots]


def compute_row_bands(row_sizes: Sequence[int], config: GridConfig) -> list[RowBand]:
    """Header band followed by one band per slot that owns rows."""
    sizes = [config.heading_rows, *row_sizes]
    return [RowBand(size, config.row_height) for size in sizes if size > 0]


def format_row_template(bands: Sequence[RowBand]) -> str:
    return " ".join(band.css() for band in bands)


def _rows_before(row_sizes: Sequence[int], index: int) -> int:
    return sum(row_sizes[:index])


def row_for_slot(
    slot_index: int,
    row_sizes: Sequence[int],
    item_duration: int,
    slot_duration: int,
    config: GridConfig,
) -> RowSpan:
    """Rows for something starting at the top of slot ``slot_index``.

    ``item_duration`` shorter than ``slot_duration`` takes a proportional,
    rounded-up share of the slot's rows.
    """
    start = 1 + config.heading_rows + _rows_before(row_sizes, slot_index)
    actual_size = _ceil_ratio(row_sizes[slot_index] * item_duration, slot_duration)
    return RowSpan(start, start + actual_size)


def column_for_tracks(
    item_tracks: Sequence[str], all_tracks: Sequence[str]
) -> ColumnSpan:
    if not item_tracks:
        raise InvalidTrackReference("Item does not name any track")
    track_index = {track: index for index, track in enumerate(all_tracks)}
    missing = [track for track in item_tracks if track not in track_index]
    if missing:
        raise InvalidTrackReference(
            f"Unknown track(s): {', '.join(missing)}",
            {"tracks": missing, "known": list(all_tracks)},
        )
    indexes = sorted({track_index[track] for track in item_tracks})
    if indexes[-1] - indexes[0] + 1 != len(indexes):
        logger.warning(
            "Tracks %s are not adjacent; span covers %d columns from %s",
            list(item_tracks),
            len(indexes),
            all_tracks[indexes[0]],
        )
    start = FIRST_TRACK_COLUMN + indexes[0]
    return ColumnSpan(start, start + len(indexes))


def _interpolate(elapsed, duration, rows: int) -> int:
    # Maps [0, duration] onto [0, rows], rounding down.
    return _floor_ratio(rows * elapsed, duration)


def row_for_orphan(
    orphan_time: int,
    row_sizes: Sequence[int],
    slots: Sequence[Slot],
    config: GridConfig,
) -> RowSpan:
    """Interpolate rows for an item that starts between slot boundaries.

    The start is placed inside the band of the latest anchored slot before
    the item and the end inside the band of the earliest anchored slot
    after it, each proportional to the elapsed time. Both edges are counted
    from line ``heading_rows``, one above the first body row. With
    ``orphan_policy="clamp"`` a missing neighbour pins that edge to the
    first or last body row instead of raising. When the start counted
    forward reaches the end counted back (an orphan in a gap between slots),
    the span is kept one row tall.
    """
    anchored = [
        (index, slot)
        for index, slot in enumerate(slots)
        if not isinstance(slot, OrphanSlot)
    ]
    before = [(index, slot) for index, slot in anchored if slot.time < orphan_time]
    after = [(index, slot) for index, slot in anchored if slot.time > orphan_time]

    if (not before or not after) and config.orphan_policy != "clamp":
        side = "preceding" if not before else "following"
        raise UnanchoredOrphan(
            f"Orphan at {minutes_to_clock(orphan_time)} has no {side} slot",
            {"time": orphan_time, "missing": side},
        )

    if before:
        before_index, slot_before = before[-1]
        start = (
            config.heading_rows
            + _rows_before(row_sizes, before_index)
            + _interpolate(
                orphan_time - slot_before.time,
                slot_before.duration,
                row_sizes[before_index],
            )
        )
    else:
        start = 1 + config.heading_rows

    if after:
        after_index, slot_after = after[0]
        end = (
            config.heading_rows
            + _rows_before(row_sizes, after_index)
            + _interpolate(
                slot_after.time - orphan_time,
                slot_after.duration,
                row_sizes[after_index],
            )
        )
    else:
        end = 1 + config.heading_rows + sum(row_sizes)

    if end <= start:
        end = start + 1
    return RowSpan(start, end)


def check_schedule(schedule: Schedule) -> None:
    """Raise on input the layout cannot place."""
    known_tracks = set(schedule.tracks)
    previous: Slot | None = None
    previous_anchored: Slot | None = None

    for index, slot in enumerate(schedule.slots):
        if isinstance(slot, OrphanSlot) and slot.item.time is None:
            raise UnanchoredOrphan(
                f"Orphan item {slot.item.id!r} in slot {index} has no start time",
                {"slot_index": index, "item": slot.item.id},
            )
        if slot.duration <= 0:
            raise NonPositiveDuration(
                f"Slot {index} at {minutes_to_clock(slot.time)} has duration "
                f"{slot.duration}",
                {"slot_index": index, "duration": slot.duration},
            )
        if previous is not None and slot.time < previous.time:
            raise UnorderedSlots(
                f"Slot {index} at {minutes_to_clock(slot.time)} starts before "
                f"slot {index - 1} at {minutes_to_clock(previous.time)}",
                {"slot_index": index},
            )
        previous = slot

        items = ()
        if isinstance(slot, OrphanSlot):
            items = (slot.item,)
        elif isinstance(slot, SessionsSlot):
            items = slot.items
        for item in items:
            if item.duration <= 0:
                raise NonPositiveDuration(
                    f"Item {item.id!r} has duration {item.duration}",
                    {"slot_index": index, "item": item.id},
                )
            if not item.tracks:
                raise InvalidTrackReference(
                    f"Item {item.id!r} does not name any track",
                    {"slot_index": index, "item": item.id},
                )
            missing = [track for track in item.tracks if track not in known_tracks]
            if missing:
                raise InvalidTrackReference(
                    f"Item {item.id!r} uses unknown track(s): {', '.join(missing)}",
                    {"slot_index": index, "item": item.id, "tracks": missing},
                )

        if isinstance(slot, OrphanSlot):
            continue
        if (
            previous_anchored is not None
            and slot.time < previous_anchored.time + previous_anchored.duration
        ):
            logger.warning(
                "Slot %d at %s overlaps the slot before it",
                index,
                minutes_to_clock(slot.time),
            )
        previous_anchored = slot


def _header_elements(
    tracks: Sequence[str], config: GridConfig
) -> list[PlacedElement]:
    rows = RowSpan(1, config.heading_rows + 1)
    elements = [
        PlacedElement(
            kind="heading",
            title="Time",
            coordinate=GridCoordinate.from_spans(
                rows, ColumnSpan(TIME_COLUMN, FIRST_TRACK_COLUMN)
            ),
        )
    ]
    for index, track in enumerate(tracks):
        column = FIRST_TRACK_COLUMN + index
        elements.append(
            PlacedElement(
                kind="heading",
                title=track,
                tracks=(track,),
                coordinate=GridCoordinate.from_spans(
                    rows, ColumnSpan(column, column + 1)
                ),
            )
        )
    return elements


def layout_schedule(
    schedule: Schedule,
    day_type: DayType | str | None = None,
    config: GridConfig | None = None,
) -> ScheduleLayout:
    """Compute the row template and every placement for one day."""
    config = config or GridConfig()
    day_type = DayType.parse(day_type if day_type is not None else schedule.day_type)
    check_schedule(schedule)

    slots = schedule.slots
    tracks = schedule.tracks
    all_columns = ColumnSpan(TIME_COLUMN, len(tracks) + FIRST_TRACK_COLUMN)
    time_column = ColumnSpan(TIME_COLUMN, FIRST_TRACK_COLUMN)

    row_sizes = compute_row_sizes(slots, day_type, config)
    logger.debug("Row sizes for %s (%s): %s", schedule.name, day_type.value, row_sizes)

    elements = _header_elements(tracks, config)

    for index, slot in enumerate(slots):
        if isinstance(slot, BreakSlot):
            row = row_for_slot(index, row_sizes, slot.duration, slot.duration, config)
            elements.append(
                PlacedElement(
                    kind="break",
                    title=slot.title,
                    time=slot.time,
                    duration=slot.duration,
                    slot_index=index,
                    coordinate=GridCoordinate.from_spans(row, all_columns),
                )
            )
        elif isinstance(slot, OrphanSlot):
            item = slot.item
            row = row_for_orphan(item.time, row_sizes, slots, config)
            elements.append(
                PlacedElement(
                    kind="orphan_time",
                    time=item.time,
                    slot_index=index,
                    coordinate=GridCoordinate.from_spans(row, time_column),
                )
            )
            elements.append(
                PlacedElement(
                    kind="orphan",
                    title=item.title,
                    time=item.time,
                    duration=item.duration,
                    slot_index=index,
                    item_id=item.id,
                    tracks=item.tracks,
                    speakers=item.speakers,
                    coordinate=GridCoordinate.from_spans(
                        row, column_for_tracks(item.tracks, tracks)
                    ),
                )
            )
        elif isinstance(slot, SessionsSlot):
            row = row_for_slot(index, row_sizes, slot.duration, slot.duration, config)
            elements.append(
                PlacedElement(
                    kind="time",
                    time=slot.time,
                    duration=slot.duration,
                    slot_index=index,
                    coordinate=GridCoordinate.from_spans(row, time_column),
                )
            )
            for item in slot.items:
                item_row = row_for_slot(
                    index, row_sizes, item.duration, slot.duration, config
                )
                elements.append(
                    PlacedElement(
                        kind="session",
                        title=item.title,
                        time=slot.time,
                        duration=item.duration,
                        slot_index=index,
                        item_id=item.id,
                        tracks=item.tracks,
                        speakers=item.speakers,
                        coordinate=GridCoordinate.from_spans(
                            item_row, column_for_tracks(item.tracks, tracks)
                        ),
                    )
                )
        else:
            raise TypeError(f"Unsupported slot type: {type(slot).__name__}")

    if slots:
        # Sits in the implicit row after the last band.
        marker_row = 1 + config.heading_rows + sum(row_sizes)
        elements.append(
            PlacedElement(
                kind="end_of_day",
                title="End of day",
                time=schedule.end_time,
                coordinate=GridCoordinate.from_spans(
                    RowSpan(marker_row, marker_row + 1), all_columns
                ),
            )
        )

    return ScheduleLayout(
        name=schedule.name,
        day_type=day_type,
        tracks=tracks,
        row_sizes=tuple(row_sizes),
        row_bands=tuple(compute_row_bands(row_sizes, config)),
        elements=tuple(elements),
        time_column_width=config.time_column_width,
    )
