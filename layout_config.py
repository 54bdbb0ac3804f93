"""Helpers for reading and applying grid layout overrides."""

from __future__ import annotations

import copy
import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from schedule_model import Schedule

logger = logging.getLogger(__name__)

ORPHAN_POLICIES = ("strict", "clamp")

DEFAULT_GRID = {
    "row_height": 25,
    "heading_rows": 2,
    "break_rows": 3,
    "session_rows": 6,
    "session_rows_tutorials": 3,
    "base_duration": 30,
    "time_column_width": "5rem",
    "orphan_policy": "strict",
}

DEFAULT_DISPLAY_OPTIONS = {
    "show_time": True,
    "show_tracks": True,
    "show_speakers": True,
}

DEFAULT_TITLE_MAX_LENGTH = 80

DEFAULT_LAYOUT = {
    "grid": DEFAULT_GRID,
    "track_order_by_day": {},
    "display_options": DEFAULT_DISPLAY_OPTIONS,
    "title_max_length": DEFAULT_TITLE_MAX_LENGTH,
}


@dataclass(frozen=True)
class GridConfig:
    """Row density and offsets used by the grid layout."""

    row_height: int = DEFAULT_GRID["row_height"]
    heading_rows: int = DEFAULT_GRID["heading_rows"]
    break_rows: int = DEFAULT_GRID["break_rows"]
    session_rows: int = DEFAULT_GRID["session_rows"]
    session_rows_tutorials: int = DEFAULT_GRID["session_rows_tutorials"]
    base_duration: int = DEFAULT_GRID["base_duration"]
    time_column_width: str = DEFAULT_GRID["time_column_width"]
    orphan_policy: str = DEFAULT_GRID["orphan_policy"]


def normalize_layout(data: dict | None) -> dict:
    layout = copy.deepcopy(DEFAULT_LAYOUT)
    if not isinstance(data, dict):
        return layout

    grid = data.get("grid")
    if isinstance(grid, dict):
        for key, default in DEFAULT_GRID.items():
            value = grid.get(key)
            if value is None:
                continue
            if isinstance(default, int):
                try:
                    number = int(value)
                except (TypeError, ValueError):
                    logger.warning("Ignoring grid.%s=%r: not an integer", key, value)
                    continue
                if number <= 0:
                    logger.warning("Ignoring grid.%s=%r: must be positive", key, value)
                    continue
                layout["grid"][key] = number
            elif key == "orphan_policy":
                if value in ORPHAN_POLICIES:
                    layout["grid"][key] = value
                else:
                    logger.warning("Ignoring unknown orphan_policy %r", value)
            elif isinstance(value, str) and value.strip():
                layout["grid"][key] = value.strip()

    track_order = data.get("track_order_by_day")
    if isinstance(track_order, dict):
        for day, tracks in track_order.items():
            if isinstance(tracks, list):
                normalized = [str(track) for track in tracks if track]
                if normalized:
                    layout["track_order_by_day"][str(day)] = normalized

    display_options = data.get("display_options")
    if isinstance(display_options, dict):
        for key in DEFAULT_DISPLAY_OPTIONS:
            value = display_options.get(key)
            if isinstance(value, bool):
                layout["display_options"][key] = value

    title_max_length = data.get("title_max_length")
    if title_max_length is not None:
        try:
            layout["title_max_length"] = max(0, int(title_max_length))
        except (TypeError, ValueError):
            pass

    return layout


def load_layout(path: Path) -> dict:
    if not path.exists():
        return copy.deepcopy(DEFAULT_LAYOUT)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Layout file %s is not valid JSON, using defaults", path)
        return copy.deepcopy(DEFAULT_LAYOUT)
    return normalize_layout(data)


def save_layout(path: Path, layout: dict) -> None:
    normalized = normalize_layout(layout)
    path.write_text(json.dumps(normalized, indent=2), encoding="utf-8")


def grid_config_from_layout(layout: dict | None) -> GridConfig:
    grid = normalize_layout(layout)["grid"] if layout else DEFAULT_GRID
    return GridConfig(**grid)


def apply_layout(schedule: Schedule, layout: dict | None) -> Schedule:
    """Return the schedule with the day's track order override applied."""
    if not layout:
        return schedule
    override = layout.get("track_order_by_day", {}).get(schedule.name, [])
    if not override:
        return schedule
    seen: set[str] = set()
    tracks: list[str] = []
    for track in override:
        if track in schedule.tracks and track not in seen:
            tracks.append(track)
            seen.add(track)
    for track in schedule.tracks:
        if track not in seen:
            tracks.append(track)
            seen.add(track)
    return dataclasses.replace(schedule, tracks=tuple(tracks))


def get_display_settings(layout: dict | None) -> tuple[dict, int]:
    display = copy.deepcopy(DEFAULT_DISPLAY_OPTIONS)
    title_max_length = DEFAULT_TITLE_MAX_LENGTH
    if layout:
        display.update(layout.get("display_options", {}))
        title_max_length = layout.get("title_max_length", title_max_length)
    return display, title_max_length
