"""Shared schedules for the grid layout tests."""

from __future__ import annotations

import copy

import pytest

from schedule_model import Schedule, schedule_from_dict

# Three rooms, a keynote across all of them, a short break, a long slot with
# items shorter than the slot, an orphan between slots and a lunch break.
CONFERENCE_DAY = {
    "name": "Wednesday",
    "day_type": "Talks",
    "rooms": ["Forum", "Liberty", "Terrace"],
    "slots": [
        {
            "type": "sessions",
            "time": "09:00",
            "duration": 30,
            "sessions": [
                {
                    "id": "keynote",
                    "title": "Opening keynote",
                    "duration": 30,
                    "rooms": ["Forum", "Liberty", "Terrace"],
                    "speakers": ["Ada Lovelace"],
                }
            ],
        },
        {"type": "break", "time": "09:30", "duration": 15, "title": "Coffee"},
        {
            "type": "sessions",
            "time": "09:45",
            "duration": 60,
            "sessions": [
                {"id": "t1", "title": "Async all the way", "duration": 60, "rooms": ["Forum"]},
                {"id": "t2", "title": "Packaging today", "duration": 30, "rooms": ["Liberty"]},
                {"id": "t3", "title": "Typing tricks", "duration": 45, "rooms": ["Terrace"]},
            ],
        },
        {
            "type": "orphan",
            "session": {
                "id": "o1",
                "title": "Lightning talk",
                "time": "10:50",
                "duration": 20,
                "rooms": ["Liberty"],
            },
        },
        {
            "type": "sessions",
            "time": "11:00",
            "duration": 30,
            "sessions": [
                {"id": "t4", "title": "Panel", "duration": 30, "rooms": ["Forum", "Liberty"]},
            ],
        },
        {"type": "break", "time": "11:30", "duration": 60, "title": "Lunch"},
    ],
}


@pytest.fixture
def conference_day_data() -> dict:
    return copy.deepcopy(CONFERENCE_DAY)


@pytest.fixture
def conference_day() -> Schedule:
    return schedule_from_dict(copy.deepcopy(CONFERENCE_DAY))
