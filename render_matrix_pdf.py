#!/usr/bin/env python3
"""Render grid-laid-out schedule days as PDFs."""

from __future__ import annotations

import argparse
import logging
import unicodedata
from dataclasses import dataclass
from pathlib import Path

from fpdf import FPDF

import layout_config
from grid_layout import PlacedElement, ScheduleLayout
from layout_errors import ScheduleLayoutError
from logging_config import setup_logging
from schedule_model import Schedule, load_schedules, minutes_to_clock
from schedule_tool import add_logging_arguments, build_layouts, select_schedules, slugify

logger = logging.getLogger(__name__)

HEADER_FILL = (236, 230, 219)
TIME_FILL = (244, 239, 231)
BREAK_FILL = (240, 231, 214)
EVENT_FILL = (255, 253, 247)
GRID_COLOR = (180, 170, 160)


@dataclass
class RenderConfig:
    page_size: str
    orientation: str
    margin: float
    header_height: float
    time_col_width: float
    header_font_size: float
    body_font_size: float
    padding: float


def sanitize_text(value: str | None) -> str:
    if not value:
        return ""
    text = str(value)
    replacements = {
        "\u2013": "-",
        "\u2014": "-",
        "\u2018": "'",
        "\u2019": "'",
        "\u201c": "\"",
        "\u201d": "\"",
        "\u2026": "...",
    }
    for src, dest in replacements.items():
        text = text.replace(src, dest)
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    return " ".join(text.split())


def wrap_text(pdf: FPDF, text: str, max_width: float) -> list[str]:
    words = text.split()
    if not words:
        return []
    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if pdf.get_string_width(candidate) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        if pdf.get_string_width(word) <= max_width:
            current = word
            continue
        chunk = ""
        for char in word:
            test = chunk + char
            if pdf.get_string_width(test) <= max_width:
                chunk = test
            else:
                if chunk:
                    lines.append(chunk)
                chunk = char
        current = chunk
    if current:
        lines.append(current)
    return lines


def shorten_line(pdf: FPDF, text: str, max_width: float, suffix: str = "...") -> str:
    if pdf.get_string_width(text) <= max_width:
        return text
    trimmed = text
    while trimmed and pdf.get_string_width(trimmed + suffix) > max_width:
        trimmed = trimmed[:-1]
    if not trimmed:
        return suffix
    return trimmed.rstrip() + suffix


def truncate_lines(
    pdf: FPDF, lines: list[str], max_width: float, max_lines: int
) -> list[str]:
    if len(lines) <= max_lines:
        return lines
    trimmed = lines[:max_lines]
    trimmed[-1] = shorten_line(pdf, trimmed[-1], max_width)
    return trimmed


def draw_cell(
    pdf: FPDF,
    x: float,
    y: float,
    width: float,
    height: float,
    lines: list[str],
    fill_color: tuple[int, int, int] | None,
    align: str = "L",
    bold: bool = False,
    font_size: float | None = None,
    padding: float = 1.0,
) -> None:
    if fill_color:
        pdf.set_fill_color(*fill_color)
        pdf.rect(x, y, width, height, style="DF")
    else:
        pdf.rect(x, y, width, height)

    if not lines:
        return

    style = "B" if bold else ""
    if font_size is not None:
        pdf.set_font("Helvetica", style=style, size=font_size)
    else:
        pdf.set_font("Helvetica", style=style)
    line_height = pdf.font_size * 1.2
    max_lines = max(1, int((height - 2 * padding) / line_height))
    text_lines = truncate_lines(pdf, lines, width - 2 * padding, max_lines)
    cursor_y = y + padding
    for line in text_lines:
        pdf.set_xy(x + padding, cursor_y)
        pdf.cell(width - 2 * padding, line_height, line, align=align)
        cursor_y += line_height



def build_element_lines(
    pdf: FPDF, element: PlacedElement, max_width: float, display: dict
) -> list[str]:
    if element.kind in ("time", "orphan_time"):
        return [minutes_to_clock(element.time)] if display.get("show_time") else []
    if element.kind == "heading":
        return wrap_text(pdf, sanitize_text(element.title), max_width)
    if element.kind in ("break", "end_of_day"):
        title = sanitize_text(element.title)
        if display.get("show_time") and element.time is not None:
            title = f"{minutes_to_clock(element.time)}  {title}"
        return wrap_text(pdf, title, max_width)

    lines = wrap_text(pdf, sanitize_text(element.title or "(Untitled)"), max_width)
    details: list[str] = []
    if display.get("show_speakers") and element.speakers:
        details.append(sanitize_text(", ".join(element.speakers)))
    if display.get("show_tracks") and element.tracks:
        details.append(sanitize_text(" / ".join(element.tracks)))
    for detail in details:
        lines.extend(wrap_text(pdf, detail, max_width))
    return lines


@dataclass
class GridGeometry:
    """Maps grid lines to page coordinates in millimetres."""

    x: float
    y: float
    time_col_width: float
    track_col_width: float
    row_height: float

    def column_x(self, line: int) -> float:
        if line <= 1:
            return self.x
        return self.x + self.time_col_width + (line - 2) * self.track_col_width

    def row_y(self, line: int) -> float:
        return self.y + (line - 1) * self.row_height

    def box(self, element: PlacedElement) -> tuple[float, float, float, float]:
        coordinate = element.coordinate
        x = self.column_x(coordinate.column_start)
        y = self.row_y(coordinate.row_start)
        width = self.column_x(coordinate.column_end) - x
        height = self.row_y(coordinate.row_end) - y
        return x, y, width, height


def new_pdf(config: RenderConfig) -> FPDF:
    return FPDF(
        orientation=config.orientation[0].upper(),
        unit="mm",
        format=config.page_size,
    )

def render_day(
    pdf: FPDF,
    schedule: Schedule,
    grid: ScheduleLayout,
    config: RenderConfig,
    display_options: dict | None = None,
) -> None:
    if not grid.elements:
        return
    display = dict(layout_config.DEFAULT_DISPLAY_OPTIONS)
    display.update(display_options or {})

    pdf.add_page()
    pdf.set_auto_page_break(auto=False, margin=0)

    pdf.set_font("Helvetica", style="B", size=14)
    pdf.set_xy(config.margin, config.margin)
    pdf.cell(0, 6, sanitize_text(schedule.name), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", size=9)
    pdf.set_x(config.margin)
    pdf.cell(0, 5, sanitize_text(grid.day_type.value), new_x="LMARGIN", new_y="NEXT")

    table_y = config.margin + config.header_height
    table_width = pdf.w - 2 * config.margin
    table_height = pdf.h - config.margin - table_y
    last_line = max(element.coordinate.row_end for element in grid.elements)

    geometry = GridGeometry(
        x=config.margin,
        y=table_y,
        time_col_width=config.time_col_width,
        track_col_width=(table_width - config.time_col_width) / max(1, len(grid.tracks)),
        row_height=table_height / max(1, last_line - 1),
    )
    logger.debug(
        "PDF grid for %s: %d lines, row height %.2fmm",
        schedule.name,
        last_line,
        geometry.row_height,
    )

    pdf.set_draw_color(*GRID_COLOR)
    pdf.set_line_width(0.1)

    fills = {
        "heading": HEADER_FILL,
        "time": TIME_FILL,
        "orphan_time": TIME_FILL,
        "break": BREAK_FILL,
        "end_of_day": BREAK_FILL,
    }
    for element in grid.elements:
        x, y, width, height = geometry.box(element)
        font_size = (
            config.header_font_size
            if element.kind == "heading"
            else config.body_font_size
        )
        pdf.set_font("Helvetica", size=font_size)
        lines = build_element_lines(
            pdf, element, width - 2 * config.padding, display
        )
        centered = element.kind in ("heading", "time", "orphan_time", "break", "end_of_day")
        draw_cell(
            pdf,
            x,
            y,
            width,
            height,
            lines,
            fills.get(element.kind, EVENT_FILL),
            align="C" if centered else "L",
            bold=element.kind in ("heading", "break", "end_of_day"),
            font_size=font_size,
            padding=config.padding,
        )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render grid-laid-out schedule days as PDFs."
    )
    add_logging_arguments(parser)
    parser.add_argument("schedule", type=Path, help="Schedule JSON file")
    parser.add_argument("--day", help="Only render this day")
    parser.add_argument("--outdir", type=Path, default=Path("output-pdf"))
    parser.add_argument("--page-size", default="A4")
    parser.add_argument(
        "--orientation", choices=["portrait", "landscape"], default="landscape"
    )
    parser.add_argument("--font-size", type=float, default=6.5)
    parser.add_argument(
        "--layout",
        type=Path,
        default=Path("layout.json"),
        help="Layout overrides JSON",
    )
    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)
    if not args.schedule.exists():
        raise SystemExit(f"Schedule file not found: {args.schedule}")

    layout = layout_config.load_layout(args.layout)
    display_options, _ = layout_config.get_display_settings(layout)

    config = RenderConfig(
        page_size=args.page_size,
        orientation=args.orientation,
        margin=8.0,
        header_height=16.0,
        time_col_width=18.0,
        header_font_size=7.0,
        body_font_size=float(args.font_size),
        padding=1.2,
    )

    try:
        schedules = select_schedules(load_schedules(args.schedule), args.day)
        layouts = build_layouts(schedules, layout)
    except ScheduleLayoutError as exc:
        raise SystemExit(f"{exc.code.value}: {exc.message}") from exc

    args.outdir.mkdir(parents=True, exist_ok=True)
    outputs: list[Path] = []

    for schedule, grid in layouts:
        pdf = new_pdf(config)
        render_day(pdf, schedule, grid, config, display_options=display_options)
        output_path = args.outdir / f"day-{slugify(schedule.name)}.pdf"
        pdf.output(str(output_path))
        outputs.append(output_path)

    if outputs:
        print(f"Rendered {len(outputs)} PDFs in {args.outdir}")
    else:
        print("No days found to render.")


if __name__ == "__main__":
    main()
