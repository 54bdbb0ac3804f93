"""Schedule data model and JSON loading.

Times are minutes from midnight and durations are minutes. Slots keep the
order they have in the source file.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from layout_errors import InvalidDayType, ScheduleFormatError

CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class DayType(str, Enum):
    TUTORIALS = "Tutorials"
    TALKS = "Talks"

    @classmethod
    def parse(cls, value: DayType | str) -> DayType:
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        raise InvalidDayType(
            f"Unknown day type {value!r}", {"day_type": value}
        )


@dataclass(frozen=True)
class Item:
    id: str
    title: str
    duration: int
    tracks: tuple[str, ...]
    time: int | None = None
    speakers: tuple[str, ...] = ()


@dataclass(frozen=True)
class BreakSlot:
    time: int
    duration: int
    title: str


@dataclass(frozen=True)
class OrphanSlot:
    item: Item

    @property
    def time(self) -> int:
        return self.item.time

    @property
    def duration(self) -> int:
        return self.item.duration


@dataclass(frozen=True)
class SessionsSlot:
    time: int
    duration: int
    items: tuple[Item, ...]


Slot = BreakSlot | OrphanSlot | SessionsSlot


@dataclass(frozen=True)
class Schedule:
    name: str
    day_type: DayType
    tracks: tuple[str, ...]
    slots: tuple[Slot, ...] = field(default_factory=tuple)

    @property
    def end_time(self) -> int | None:
        if not self.slots:
            return None
        last = self.slots[-1]
        return last.time + last.duration


def parse_clock(value: int | float | str) -> int:
    if isinstance(value, bool):
        raise ScheduleFormatError(f"Invalid time {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    match = CLOCK_RE.match(str(value).strip())
    if not match:
        raise ScheduleFormatError(f"Invalid time {value!r}", {"time": value})
    hour = int(match.group(1))
    minute = int(match.group(2))
    if hour > 24 or minute > 59:
        raise ScheduleFormatError(f"Invalid time {value!r}", {"time": value})
    return hour * 60 + minute


def minutes_to_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def truncate_text(text: str, max_length: int | None) -> str:
    if not text:
        return ""
    if not max_length or max_length <= 0:
        return text
    if len(text) <= max_length:
        return text
    suffix = "..."
    if max_length <= len(suffix):
        return text[:max_length]
    trimmed = text[: max_length - len(suffix)].rstrip()
    if not trimmed:
        return text[:max_length]
    return trimmed + suffix


def _require(data: dict, key: str, context: str):
    if key not in data:
        raise ScheduleFormatError(
            f"{context} is missing {key!r}", {"context": context, "key": key}
        )
    return data[key]


def _parse_duration(value, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScheduleFormatError(
            f"{context} has invalid duration {value!r}", {"context": context}
        )
    return int(value)


def item_from_dict(data: dict, default_time: int | None = None) -> Item:
    if not isinstance(data, dict):
        raise ScheduleFormatError(f"Session entry must be an object, got {data!r}")
    item_id = str(data.get("id") or data.get("title") or "")
    context = f"session {item_id!r}" if item_id else "session"
    rooms = _require(data, "rooms", context)
    if isinstance(rooms, str):
        rooms = [rooms]
    time = data.get("time")
    speakers = data.get("speakers") or []
    if isinstance(speakers, str):
        speakers = [speakers]
    return Item(
        id=item_id,
        title=str(data.get("title") or ""),
        duration=_parse_duration(_require(data, "duration", context), context),
        tracks=tuple(str(room) for room in rooms),
        time=parse_clock(time) if time is not None else default_time,
        speakers=tuple(str(speaker) for speaker in speakers),
    )


def slot_from_dict(data: dict) -> Slot:
    if not isinstance(data, dict):
        raise ScheduleFormatError(f"Slot entry must be an object, got {data!r}")
    slot_type = data.get("type", "sessions")

    if slot_type == "break":
        return BreakSlot(
            time=parse_clock(_require(data, "time", "break")),
            duration=_parse_duration(_require(data, "duration", "break"), "break"),
            title=str(data.get("title") or "Break"),
        )

    if slot_type == "orphan":
        session = _require(data, "session", "orphan slot")
        slot_time = data.get("time")
        item = item_from_dict(
            session,
            default_time=parse_clock(slot_time) if slot_time is not None else None,
        )
        if item.time is None:
            raise ScheduleFormatError(
                f"Orphan session {item.id!r} has no time", {"item": item.id}
            )
        return OrphanSlot(item=item)

    if slot_type == "sessions":
        time = parse_clock(_require(data, "time", "sessions slot"))
        sessions = _require(data, "sessions", "sessions slot")
        return SessionsSlot(
            time=time,
            duration=_parse_duration(
                _require(data, "duration", "sessions slot"), "sessions slot"
            ),
            items=tuple(item_from_dict(entry, default_time=time) for entry in sessions),
        )

    raise ScheduleFormatError(
        f"Unknown slot type {slot_type!r}", {"type": slot_type}
    )


def schedule_from_dict(data: dict, name: str = "") -> Schedule:
    if not isinstance(data, dict):
        raise ScheduleFormatError("Schedule must be a JSON object")
    name = str(data.get("name") or name or "Schedule")
    rooms = _require(data, "rooms", f"day {name!r}")
    if isinstance(rooms, str):
        rooms = [rooms]
    slots = _require(data, "slots", f"day {name!r}")
    return Schedule(
        name=name,
        day_type=DayType.parse(data.get("day_type", DayType.TALKS)),
        tracks=tuple(str(room) for room in rooms),
        slots=tuple(slot_from_dict(slot) for slot in slots),
    )


def load_schedules(path: Path) -> list[Schedule]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScheduleFormatError(
            f"{path} is not valid JSON: {exc}", {"path": str(path)}
        ) from exc
    if isinstance(data, dict) and "days" in data:
        days = data["days"]
        if isinstance(days, dict):
            return [schedule_from_dict(day, name=key) for key, day in days.items()]
        return [schedule_from_dict(day) for day in days]
    return [schedule_from_dict(data)]
