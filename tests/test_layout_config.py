import layout_config
from layout_config import GridConfig


def test_missing_file_gives_defaults(tmp_path) -> None:
    layout = layout_config.load_layout(tmp_path / "layout.json")
    assert layout == layout_config.DEFAULT_LAYOUT
    assert layout is not layout_config.DEFAULT_LAYOUT


def test_invalid_json_gives_defaults(tmp_path) -> None:
    path = tmp_path / "layout.json"
    path.write_text("{", encoding="utf-8")
    assert layout_config.load_layout(path) == layout_config.DEFAULT_LAYOUT


def test_normalize_keeps_valid_grid_values() -> None:
    layout = layout_config.normalize_layout(
        {"grid": {"session_rows": "8", "time_column_width": "6rem", "orphan_policy": "clamp"}}
    )
    assert layout["grid"]["session_rows"] == 8
    assert layout["grid"]["time_column_width"] == "6rem"
    assert layout["grid"]["orphan_policy"] == "clamp"
    assert layout["grid"]["break_rows"] == 3


def test_normalize_drops_bad_grid_values() -> None:
    layout = layout_config.normalize_layout(
        {"grid": {"session_rows": 0, "row_height": "tall", "orphan_policy": "guess"}}
    )
    assert layout["grid"] == layout_config.DEFAULT_GRID


def test_normalize_display_and_title_length() -> None:
    layout = layout_config.normalize_layout(
        {
            "display_options": {"show_speakers": False, "show_time": "no"},
            "title_max_length": "-4",
        }
    )
    assert layout["display_options"]["show_speakers"] is False
    assert layout["display_options"]["show_time"] is True
    assert layout["title_max_length"] == 0


def test_grid_config_from_layout() -> None:
    assert layout_config.grid_config_from_layout(None) == GridConfig()
    config = layout_config.grid_config_from_layout(
        {"grid": {"session_rows_tutorials": 4, "heading_rows": 1}}
    )
    assert config.session_rows_tutorials == 4
    assert config.heading_rows == 1
    assert config.session_rows == 6


def test_apply_layout_reorders_tracks(conference_day) -> None:
    layout = layout_config.normalize_layout(
        {"track_order_by_day": {"Wednesday": ["Terrace", "Nowhere", "Terrace"]}}
    )
    reordered = layout_config.apply_layout(conference_day, layout)
    assert reordered.tracks == ("Terrace", "Forum", "Liberty")
    assert reordered.slots == conference_day.slots


def test_apply_layout_ignores_other_days(conference_day) -> None:
    layout = layout_config.normalize_layout(
        {"track_order_by_day": {"Friday": ["Terrace"]}}
    )
    assert layout_config.apply_layout(conference_day, layout) is conference_day


def test_save_layout_normalizes(tmp_path) -> None:
    path = tmp_path / "layout.json"
    layout_config.save_layout(path, {"grid": {"break_rows": 4}, "bogus": True})
    loaded = layout_config.load_layout(path)
    assert loaded["grid"]["break_rows"] == 4
    assert "bogus" not in loaded


def test_display_settings() -> None:
    display, title_max_length = layout_config.get_display_settings(None)
    assert display == layout_config.DEFAULT_DISPLAY_OPTIONS
    assert title_max_length == layout_config.DEFAULT_TITLE_MAX_LENGTH
