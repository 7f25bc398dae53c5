"""
Marker extraction and statistics over converted or loaded profiles.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .model import Category, Thread

__all__ = [
    "ParsedMarker",
    "MarkerStats",
    "extract_markers",
    "filter_by_type",
    "filter_by_category",
    "filter_by_duration",
    "marker_stats",
]


@dataclass
class ParsedMarker:
    name: str = ""
    type: str = ""
    category: str = ""
    start_time: float = 0.0
    end_time: float = 0.0
    duration: float = 0.0
    phase: int = 0
    data: dict[str, Any] | None = None
    thread_name: str = ""
    thread_pid: str = ""

    @property
    def is_duration(self) -> bool:
        return self.duration > 0


@dataclass
class MarkerStats:
    total_count: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)
    total_duration: float = 0.0
    avg_duration: float = 0.0
    max_duration: float = 0.0
    min_duration: float | None = None


def _at(column: list, index: int, default=None):
    return column[index] if 0 <= index < len(column) else default


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _decode_data(raw) -> dict | None:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
    return raw if isinstance(raw, dict) else None


def extract_markers(thread: Thread, categories: list[Category]) -> list[ParsedMarker]:
    """
    Resolve the marker columns of ``thread`` into :class:`ParsedMarker` rows.

    Out of range name or category indices resolve to empty strings. End times
    that are not numbers mean the marker has no end, and only strictly positive
    spans produce a duration.
    """
    columns = thread.markers
    markers = []
    for i in range(columns.length):
        marker = ParsedMarker(
            phase=_at(columns.phase, i, 0),
            thread_name=thread.name,
            thread_pid=thread.pid,
        )
        marker.name = thread.string_at(_at(columns.name, i)) or ""

        category = _at(columns.category, i)
        if isinstance(category, int) and 0 <= category < len(categories):
            marker.category = categories[category].name

        start = _at(columns.start_time, i, 0.0)
        marker.start_time = float(start) if _is_number(start) else 0.0
        end = _at(columns.end_time, i)
        if _is_number(end):
            marker.end_time = float(end)
            if marker.end_time > marker.start_time:
                marker.duration = marker.end_time - marker.start_time

        marker.data = _decode_data(_at(columns.data, i))
        if marker.data is not None and isinstance(marker.data.get("type"), str):
            marker.type = marker.data["type"]
        if not marker.type:
            marker.type = marker.name

        markers.append(marker)
    return markers


def filter_by_type(markers: list[ParsedMarker], marker_type: str) -> list[ParsedMarker]:
    return [m for m in markers if m.type == marker_type or m.name == marker_type]


def filter_by_category(markers: list[ParsedMarker], category: str) -> list[ParsedMarker]:
    return [m for m in markers if m.category == category]


def filter_by_duration(markers: list[ParsedMarker], min_ms: float) -> list[ParsedMarker]:
    return [m for m in markers if m.duration >= min_ms]


def marker_stats(markers: list[ParsedMarker]) -> MarkerStats:
    stats = MarkerStats(
        total_count=len(markers),
        by_type=dict(Counter(m.type for m in markers)),
        by_category=dict(Counter(m.category for m in markers)),
    )
    if not markers:
        return stats

    durations = np.array([m.duration for m in markers], dtype=np.float64)
    positive = durations[durations > 0]
    stats.total_duration = float(positive.sum())
    # average over all markers, instants included
    stats.avg_duration = stats.total_duration / stats.total_count
    if positive.size:
        stats.max_duration = float(positive.max())
        stats.min_duration = float(positive.min())
    return stats
