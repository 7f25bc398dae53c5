"""
In-memory model of a Chrome trace document.

A trace is a flat, time-ordered list of heterogeneous events. Only a handful of
fields are interpreted by the converter, everything else is carried in ``args``.
Parsing is lenient: a field with the wrong JSON type is replaced by its default
instead of failing the whole document.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..errors import TraceFormatError

__all__ = [
    "PHASE_BEGIN",
    "PHASE_END",
    "PHASE_COMPLETE",
    "PHASE_METADATA",
    "PHASE_INSTANT",
    "PHASE_COUNTER",
    "PHASE_ASYNC_START",
    "PHASE_ASYNC_FINISH",
    "PHASE_NESTABLE_BEGIN",
    "PHASE_NESTABLE_END",
    "PHASE_NESTABLE_STEP",
    "PHASE_FLOW_START",
    "PHASE_FLOW_END",
    "PHASE_SAMPLE",
    "PHASE_OBJECT_SNAPSHOT",
    "PHASE_OBJECT_CREATED",
    "PHASE_OBJECT_DESTROYED",
    "PHASE_MARK",
    "TraceEvent",
    "TraceMetadata",
    "TraceDocument",
    "CallFrame",
    "CPUProfileNode",
    "CPUProfile",
    "ProfileChunk",
    "event_id_to_string",
]


PHASE_BEGIN = "B"
PHASE_END = "E"
PHASE_COMPLETE = "X"
PHASE_METADATA = "M"
PHASE_INSTANT = "I"
PHASE_COUNTER = "C"
PHASE_ASYNC_START = "S"
PHASE_ASYNC_FINISH = "F"
PHASE_NESTABLE_BEGIN = "b"
PHASE_NESTABLE_END = "e"
PHASE_NESTABLE_STEP = "n"
PHASE_FLOW_START = "s"
PHASE_FLOW_END = "f"
PHASE_SAMPLE = "P"
PHASE_OBJECT_SNAPSHOT = "O"
PHASE_OBJECT_CREATED = "N"
PHASE_OBJECT_DESTROYED = "D"
PHASE_MARK = "R"


def _str(value, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _float(value, default: float = 0.0) -> float:
    # bool is an int subclass but never a valid timestamp
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return default
    try:
        value = float(value)
    except OverflowError:
        return default
    return value if math.isfinite(value) else default


def _int(value, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _int_list(value) -> list[int]:
    if not isinstance(value, list):
        return []
    return [_int(v) for v in value]


def _number_list(value) -> list[float]:
    if not isinstance(value, list):
        return []
    return [_float(v) for v in value]


def event_id_to_string(event_id) -> str:
    """
    Normalize a trace event id to text.

    Ids are emitted either as strings (``"0x1"``) or as JSON numbers; integral
    numbers are rendered without a fractional part so that ``1`` and ``1.0``
    correlate with each other.
    """
    if event_id is None:
        return ""
    if isinstance(event_id, str):
        return event_id
    if isinstance(event_id, bool):
        return str(event_id).lower()
    if isinstance(event_id, int):
        return str(event_id)
    if isinstance(event_id, float) and event_id.is_integer():
        return str(int(event_id))
    return str(event_id)


@dataclass(frozen=True)
class TraceEvent:
    name: str = ""
    cat: str = ""
    ph: str = ""
    ts: float = 0.0
    dur: float = 0.0
    pid: int = 0
    tid: int = 0
    tts: float = 0.0
    args: Any = None
    id: Any = None
    scope: str = ""
    bp: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "TraceEvent":
        return cls(
            name=_str(data.get("name")),
            cat=_str(data.get("cat")),
            ph=_str(data.get("ph")),
            ts=_float(data.get("ts")),
            dur=_float(data.get("dur")),
            pid=_int(data.get("pid")),
            tid=_int(data.get("tid")),
            tts=_float(data.get("tts")),
            args=data.get("args"),
            id=data.get("id"),
            scope=_str(data.get("scope")),
            bp=_str(data.get("bp")),
        )

    def to_dict(self) -> dict:
        out = {
            "name": self.name,
            "cat": self.cat,
            "ph": self.ph,
            "ts": self.ts,
            "pid": self.pid,
            "tid": self.tid,
        }
        if self.dur:
            out["dur"] = self.dur
        if self.tts:
            out["tts"] = self.tts
        if self.args is not None:
            out["args"] = self.args
        if self.id is not None:
            out["id"] = self.id
        if self.scope:
            out["scope"] = self.scope
        if self.bp:
            out["bp"] = self.bp
        return out

    @property
    def categories(self) -> list[str]:
        return [c.strip() for c in self.cat.split(",") if c.strip()]

    @property
    def thread_key(self) -> tuple[int, int]:
        return (self.pid, self.tid)


@dataclass
class TraceMetadata:
    source: str = ""
    start_time: str = ""
    data_origin: str = ""
    host_dpr: float = 0.0
    enhanced_trace_version: int = 0
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data) -> "TraceMetadata":
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            source=_str(data.get("source")),
            start_time=_str(data.get("startTime")),
            data_origin=_str(data.get("dataOrigin")),
            host_dpr=_float(data.get("hostDPR")),
            enhanced_trace_version=_int(data.get("enhancedTraceVersion")),
            raw=dict(data),
        )


@dataclass
class TraceDocument:
    events: list[TraceEvent] = field(default_factory=list)
    metadata: TraceMetadata = field(default_factory=TraceMetadata)

    @classmethod
    def from_json(cls, data) -> "TraceDocument":
        """
        Build a document from decoded JSON.

        Accepts both the object form (``{"traceEvents": [...], "metadata": {...}}``)
        and the bare array form (``[...]``). Entries of the event array that are not
        objects are dropped.

        Raises:
            TraceFormatError: If the top-level value has neither shape.
        """
        if isinstance(data, list):
            raw_events = data
            metadata = TraceMetadata()
        elif isinstance(data, Mapping):
            raw_events = data.get("traceEvents", [])
            if raw_events is None:
                raw_events = []
            if not isinstance(raw_events, list):
                raise TraceFormatError("'traceEvents' must be an array")
            metadata = TraceMetadata.from_dict(data.get("metadata"))
        else:
            raise TraceFormatError(
                f"Trace must be a JSON object or array, got {type(data).__name__}"
            )

        events = [TraceEvent.from_dict(e) for e in raw_events if isinstance(e, Mapping)]
        return cls(events=events, metadata=metadata)

    def to_json(self) -> dict:
        out = {"traceEvents": [e.to_dict() for e in self.events]}
        if self.metadata.raw:
            out["metadata"] = dict(self.metadata.raw)
        elif self.metadata.start_time or self.metadata.source:
            out["metadata"] = {
                "source": self.metadata.source,
                "startTime": self.metadata.start_time,
            }
        return out


# V8 CPU profiler payload carried by ProfileChunk events


@dataclass(frozen=True)
class CallFrame:
    function_name: str = ""
    script_id: Any = None
    url: str = ""
    line_number: int = 0
    column_number: int = 0
    code_type: str = ""

    @classmethod
    def from_dict(cls, data) -> "CallFrame":
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            function_name=_str(data.get("functionName")),
            script_id=data.get("scriptId"),
            url=_str(data.get("url")),
            line_number=_int(data.get("lineNumber")),
            column_number=_int(data.get("columnNumber")),
            code_type=_str(data.get("codeType")),
        )


@dataclass(frozen=True)
class CPUProfileNode:
    id: int
    call_frame: CallFrame
    hit_count: int = 0
    children: tuple[int, ...] = ()
    # 0 means no parent, node ids start at 1
    parent: int = 0

    @classmethod
    def from_dict(cls, data: Mapping) -> "CPUProfileNode":
        return cls(
            id=_int(data.get("id")),
            call_frame=CallFrame.from_dict(data.get("callFrame")),
            hit_count=_int(data.get("hitCount")),
            children=tuple(_int_list(data.get("children"))),
            parent=_int(data.get("parent")),
        )


@dataclass
class CPUProfile:
    nodes: list[CPUProfileNode] = field(default_factory=list)
    samples: list[int] = field(default_factory=list)
    time_deltas: list[float] = field(default_factory=list)
    start_time: int = 0
    end_time: int = 0

    @classmethod
    def from_dict(cls, data) -> "CPUProfile":
        if not isinstance(data, Mapping):
            return cls()
        nodes = data.get("nodes")
        return cls(
            nodes=[CPUProfileNode.from_dict(n) for n in nodes if isinstance(n, Mapping)]
            if isinstance(nodes, list) else [],
            samples=_int_list(data.get("samples")),
            time_deltas=_number_list(data.get("timeDeltas")),
            start_time=_int(data.get("startTime")),
            end_time=_int(data.get("endTime")),
        )

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.samples


@dataclass
class ProfileChunk:
    """The ``args.data`` payload of a ``ProfileChunk`` event."""

    cpu_profile: CPUProfile
    time_deltas: list[float] = field(default_factory=list)

    @classmethod
    def from_args(cls, args) -> "ProfileChunk | None":
        """
        Decode a ProfileChunk payload, returning ``None`` when it has no ``data``
        object.
        """
        if not isinstance(args, Mapping):
            return None
        data = args.get("data")
        if not isinstance(data, Mapping):
            return None
        return cls(
            cpu_profile=CPUProfile.from_dict(data.get("cpuProfile")),
            time_deltas=_number_list(data.get("timeDeltas")),
        )

    def effective_time_deltas(self) -> Sequence[float]:
        # chunk-level deltas take precedence over the embedded profile's own
        return self.time_deltas or self.cpu_profile.time_deltas
