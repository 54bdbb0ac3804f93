#!/usr/bin/env python3
"""Lay out multi-track conference days on a grid and render them as HTML."""

from __future__ import annotations

import argparse
import html
import json
import logging
import re
from pathlib import Path

import layout_config
from grid_layout import PlacedElement, ScheduleLayout, layout_schedule
from layout_errors import ScheduleLayoutError
from logging_config import setup_logging
from schedule_model import (
    Schedule,
    load_schedules,
    minutes_to_clock,
    truncate_text,
)

logger = logging.getLogger(__name__)


def normalize_display_settings(
    display_options: dict | None, title_max_length: int | None
) -> tuple[dict, int]:
    display = dict(layout_config.DEFAULT_DISPLAY_OPTIONS)
    if display_options:
        display.update(display_options)
    if title_max_length is None:
        title_max_length = layout_config.DEFAULT_TITLE_MAX_LENGTH
    return display, title_max_length


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "day"


def build_layouts(
    schedules: list[Schedule], layout: dict | None = None
) -> list[tuple[Schedule, ScheduleLayout]]:
    config = layout_config.grid_config_from_layout(layout)
    results = []
    for schedule in schedules:
        schedule = layout_config.apply_layout(schedule, layout)
        grid = layout_schedule(schedule, config=config)
        logger.info(
            "Laid out %s: %d slots, %d rows, %d elements",
            schedule.name,
            len(schedule.slots),
            grid.total_rows,
            len(grid.elements),
        )
        results.append((schedule, grid))
    return results


def element_style(element: PlacedElement) -> str:
    return (
        f"--grid-row: {element.coordinate.grid_row}; "
        f"--grid-column: {element.coordinate.grid_column};"
    )


def render_element_html(
    element: PlacedElement, display: dict, title_max_length: int
) -> str:
    style = html.escape(element_style(element))
    if element.kind == "heading":
        return (
            f"<div class=\"schedule-item heading\" style=\"{style}\">"
            f"{html.escape(element.title)}</div>"
        )
    if element.kind in ("time", "orphan_time"):
        label = minutes_to_clock(element.time) if display.get("show_time") else ""
        return (
            f"<div class=\"schedule-item time-label {element.kind}\" style=\"{style}\">"
            f"{html.escape(label)}</div>"
        )
    if element.kind in ("break", "end_of_day"):
        time_html = ""
        if display.get("show_time") and element.time is not None:
            time_html = (
                f"<span class=\"break-time\">"
                f"{html.escape(minutes_to_clock(element.time))}</span>"
            )
        return (
            f"<div class=\"schedule-item break {element.kind}\" style=\"{style}\">"
            f"{time_html}<span class=\"break-title\">"
            f"{html.escape(element.title)}</span></div>"
        )

    title = html.escape(truncate_text(element.title or "(Untitled)", title_max_length))
    details = []
    if display.get("show_speakers") and element.speakers:
        details.append(", ".join(element.speakers))
    if display.get("show_tracks") and element.tracks:
        details.append(" / ".join(element.tracks))
    if display.get("show_time") and element.time is not None and element.duration:
        start = minutes_to_clock(element.time)
        end = minutes_to_clock(element.time + element.duration)
        details.append(f"{start} - {end}")
    detail_html = "".join(
        f"<div class=\"event-detail\">{html.escape(detail)}</div>"
        for detail in details
    )
    return """
<div class="schedule-item event-cell {kind}" style="{style}">
  <div class="event-title">{title}</div>
  {detail_html}
</div>
""".format(
        kind=element.kind,
        style=style,
        title=title,
        detail_html=detail_html,
    )


def render_day_grid_html(
    schedule: Schedule,
    grid: ScheduleLayout,
    display_options: dict | None = None,
    title_max_length: int | None = None,
) -> str:
    display, title_max_length = normalize_display_settings(
        display_options, title_max_length
    )

    css_template = """
:root {
  --paper: #f5f0e6;
  --ink: #1c1b1a;
  --accent: #c86b2d;
  --muted: #6b665f;
  --event-bg: #fffdf7;
  --break-bg: #f0e7d6;
  --shadow: rgba(28, 27, 26, 0.15);
}
* { box-sizing: border-box; }
body {
  margin: 0;
  background: radial-gradient(circle at 12% 8%, #f9f4ea 0%, #f0e8da 45%, #e9e1d1 100%);
  color: var(--ink);
  font-family: 'Space Grotesk', 'Avenir Next', 'Segoe UI', sans-serif;
}
.page {
  max-width: 1200px;
  margin: 28px auto;
  background: var(--paper);
  border-radius: 18px;
  box-shadow: 0 18px 45px var(--shadow);
  padding: 32px 36px 40px;
}
header h1 {
  font-family: 'Fraunces', 'Georgia', serif;
  font-size: 32px;
  margin: 0 0 4px;
}
header .subtitle {
  font-size: 14px;
  letter-spacing: 1.6px;
  text-transform: uppercase;
  color: var(--muted);
}
.schedule-grid {
  display: grid;
  gap: 4px;
  margin-top: 24px;
  grid-template-rows: __TEMPLATE_ROWS__;
  grid-template-columns: __TEMPLATE_COLUMNS__;
}
.schedule-item {
  grid-row: var(--grid-row);
  grid-column: var(--grid-column);
  overflow: hidden;
}
.heading {
  display: flex;
  align-items: center;
  justify-content: center;
  font-size: 11px;
  text-transform: uppercase;
  letter-spacing: 1.4px;
  color: var(--muted);
  background: rgba(46, 42, 37, 0.06);
  position: sticky;
  top: 0;
  z-index: 2;
}
.time-label {
  font-weight: 600;
  text-align: center;
  padding-top: 6px;
}
.break {
  display: flex;
  gap: 12px;
  align-items: center;
  justify-content: center;
  background: var(--break-bg);
  font-weight: 600;
}
.event-cell {
  background: var(--event-bg);
  border-left: 3px solid var(--accent);
  padding: 6px 8px;
  font-size: 12px;
  line-height: 1.35;
  overflow-wrap: anywhere;
}
.event-cell.orphan {
  border-left-style: dashed;
}
.event-title {
  font-weight: 600;
}
.event-detail {
  margin-top: 4px;
  font-size: 11px;
  color: var(--muted);
}
"""
    css = css_template.replace(
        "__TEMPLATE_ROWS__", grid.grid_template_rows
    ).replace("__TEMPLATE_COLUMNS__", grid.grid_template_columns)

    html_parts = [
        "<!DOCTYPE html>",
        "<html lang=\"en\">",
        "<head>",
        "<meta charset=\"utf-8\">",
        f"<title>{html.escape(schedule.name)} schedule</title>",
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">",
        f"<style>{css}</style>",
        "</head>",
        "<body>",
        "<div class=\"page\">",
        "<header>",
        f"<h1>{html.escape(schedule.name)}</h1>",
        f"<div class=\"subtitle\">{html.escape(grid.day_type.value)}</div>",
        "</header>",
        "<div class=\"schedule-grid\">",
    ]
    for element in grid.elements:
        html_parts.append(render_element_html(element, display, title_max_length))
    html_parts.extend([
        "</div>",
        "</div>",
        "</body>",
        "</html>",
    ])
    return "\n".join(html_parts)


def render_html(
    schedules: list[Schedule],
    outdir: Path,
    layout_path: Path | None = None,
) -> list[Path]:
    outdir.mkdir(parents=True, exist_ok=True)
    layout = layout_config.load_layout(layout_path) if layout_path else None
    display_options, title_max_length = layout_config.get_display_settings(layout)

    output_files: list[Path] = []
    index_links = []
    for schedule, grid in build_layouts(schedules, layout):
        html_content = render_day_grid_html(
            schedule,
            grid,
            display_options=display_options,
            title_max_length=title_max_length,
        )
        filename = f"day-{slugify(schedule.name)}.html"
        filepath = outdir / filename
        filepath.write_text(html_content, encoding="utf-8")
        output_files.append(filepath)
        index_links.append((schedule.name, filename))

    index_html = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Schedule index</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    body { font-family: 'Space Grotesk', 'Avenir Next', 'Segoe UI', sans-serif; margin: 40px; color: #1c1b1a; }
    h1 { font-family: 'Fraunces', 'Georgia', serif; }
    a { color: #c86b2d; text-decoration: none; }
    li { margin: 8px 0; }
  </style>
</head>
<body>
  <h1>Schedule</h1>
  <ul>
"""
    for day_name, filename in index_links:
        index_html += (
            f"    <li><a href=\"{filename}\">{html.escape(day_name)}</a></li>\n"
        )
    index_html += """  </ul>
</body>
</html>
"""
    (outdir / "index.html").write_text(index_html, encoding="utf-8")
    output_files.append(outdir / "index.html")
    return output_files


def select_schedules(schedules: list[Schedule], day: str | None) -> list[Schedule]:
    if not day:
        return schedules
    selected = [s for s in schedules if s.name.lower() == day.lower()]
    if not selected:
        names = ", ".join(s.name for s in schedules)
        raise SystemExit(f"No day named {day!r} (available: {names})")
    return selected


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--log-file", type=Path, help="Optional JSON log file")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Lay out a multi-track schedule on a grid and render HTML timetables."
    )
    add_logging_arguments(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    layout_parser = subparsers.add_parser("layout", help="Print grid placements as JSON")
    layout_parser.add_argument("schedule", type=Path, help="Schedule JSON file")
    layout_parser.add_argument("--day", help="Only lay out this day")
    layout_parser.add_argument(
        "--layout",
        type=Path,
        default=Path("layout.json"),
        help="Layout overrides JSON",
    )

    render_parser = subparsers.add_parser("render", help="Render timetable HTML")
    render_parser.add_argument("schedule", type=Path, help="Schedule JSON file")
    render_parser.add_argument("--day", help="Only render this day")
    render_parser.add_argument("--outdir", type=Path, default=Path("output"))
    render_parser.add_argument(
        "--layout",
        type=Path,
        default=Path("layout.json"),
        help="Layout overrides JSON",
    )

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)
    if not args.schedule.exists():
        raise SystemExit(f"Schedule file not found: {args.schedule}")

    try:
        schedules = select_schedules(load_schedules(args.schedule), args.day)

        if args.command == "layout":
            layout = layout_config.load_layout(args.layout)
            payload = [grid.to_dict() for _, grid in build_layouts(schedules, layout)]
            print(json.dumps(payload, indent=2))
            return

        if args.command == "render":
            outputs = render_html(schedules, args.outdir, layout_path=args.layout)
            print(f"Rendered {len(outputs)} files in {args.outdir}")
    except ScheduleLayoutError as exc:
        logger.debug("Layout failed: %s", exc.to_dict())
        raise SystemExit(f"{exc.code.value}: {exc.message}") from exc


if __name__ == "__main__":
    main()
