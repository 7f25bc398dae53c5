import gzip
import json

import pytest

from profconv.profile.model import Profile
from profconv.trace import TraceDocument, TraceEvent

"""

This module provides builders for synthetic Chrome trace events together with
fixtures that write traces and profiles to temporary files.

E.g.:

    def test_something(trace_file):
        path = trace_file([
            complete_event("FunctionCall", ts=1_000_000, dur=5_000),
        ], gz=True)

"""


def metadata_event(kind: str, name, pid: int = 1, tid: int = 1) -> dict:
    """``kind`` is ``thread_name`` or ``process_name``."""
    return {"name": kind, "cat": "__metadata", "ph": "M", "ts": 0, "pid": pid, "tid": tid, "args": {"name": name}}


def thread_name_event(name, pid: int = 1, tid: int = 1) -> dict:
    return metadata_event("thread_name", name, pid, tid)


def process_name_event(name, pid: int = 1, tid: int = 0) -> dict:
    return metadata_event("process_name", name, pid, tid)


def complete_event(name: str, ts: float, dur: float, cat: str = "devtools.timeline",
                   pid: int = 1, tid: int = 1, args=None) -> dict:
    event = {"name": name, "cat": cat, "ph": "X", "ts": ts, "dur": dur, "pid": pid, "tid": tid}
    if args is not None:
        event["args"] = args
    return event


def instant_event(name: str, ts: float, cat: str = "devtools.timeline", ph: str = "I",
                  pid: int = 1, tid: int = 1, args=None) -> dict:
    event = {"name": name, "cat": cat, "ph": ph, "ts": ts, "pid": pid, "tid": tid}
    if args is not None:
        event["args"] = args
    return event


def session_start_event(session_id, ts: float, pid: int = 1, tid: int = 1) -> dict:
    return {
        "name": "Profile",
        "cat": "disabled-by-default-v8.cpu_profiler",
        "ph": "P",
        "ts": ts,
        "pid": pid,
        "tid": tid,
        "id": session_id,
        "args": {"data": {"startTime": ts}},
    }


def node(node_id: int, function_name: str, url: str = "", parent: int | None = None,
         line: int = 0, column: int = 0, code_type: str | None = None) -> dict:
    call_frame = {"functionName": function_name, "scriptId": 0, "url": url,
                  "lineNumber": line, "columnNumber": column}
    if code_type is not None:
        call_frame["codeType"] = code_type
    out = {"id": node_id, "callFrame": call_frame}
    if parent is not None:
        out["parent"] = parent
    return out


def profile_chunk_event(nodes: list[dict], samples: list[int], time_deltas: list[float] | None,
                        ts: float, session_id=None, pid: int = 1, tid: int = 1,
                        nested_deltas: bool = False) -> dict:
    """
    Build a ``ProfileChunk`` event. Time deltas are put under ``args.data`` unless
    ``nested_deltas`` asks for them inside ``cpuProfile``.
    """
    cpu_profile = {"nodes": nodes, "samples": samples}
    data = {"cpuProfile": cpu_profile}
    if time_deltas is not None:
        if nested_deltas:
            cpu_profile["timeDeltas"] = time_deltas
        else:
            data["timeDeltas"] = time_deltas
    event = {
        "name": "ProfileChunk",
        "cat": "disabled-by-default-v8.cpu_profiler",
        "ph": "P",
        "ts": ts,
        "pid": pid,
        "tid": tid,
        "args": {"data": data},
    }
    if session_id is not None:
        event["id"] = session_id
    return event


def make_trace(events: list[dict], start_time: str | None = None) -> dict:
    trace = {"traceEvents": list(events)}
    if start_time is not None:
        trace["metadata"] = {"source": "DevTools", "startTime": start_time}
    return trace


def make_document(events: list[dict], start_time: str | None = None) -> TraceDocument:
    return TraceDocument.from_json(make_trace(events, start_time))


def make_event(**fields) -> TraceEvent:
    return TraceEvent.from_dict(fields)


def _write_json(path, data, gz: bool):
    if gz:
        with gzip.open(path, "wt", encoding="utf-8") as fp:
            json.dump(data, fp)
    else:
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(data, fp)
    return path


@pytest.fixture
def trace_file(tmp_path):
    """Factory writing a trace (event list or full JSON value) to a temporary file."""

    def _write(events, name: str = "trace.json", gz: bool = False, start_time: str | None = None):
        data = make_trace(events, start_time) if isinstance(events, list) else events
        if gz and not name.endswith((".gz", ".gzip")):
            name += ".gz"
        return _write_json(tmp_path / name, data, gz)

    return _write


@pytest.fixture
def profile_file(tmp_path):
    """Factory writing a canonical profile (``Profile`` or dict) to a temporary file."""

    def _write(profile, name: str = "profile.json", gz: bool = False):
        data = profile.to_dict() if isinstance(profile, Profile) else profile
        if gz and not name.endswith((".gz", ".gzip")):
            name += ".gz"
        return _write_json(tmp_path / name, data, gz)

    return _write
