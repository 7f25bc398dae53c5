from .events import (
    CallFrame,
    CPUProfile,
    CPUProfileNode,
    ProfileChunk,
    TraceDocument,
    TraceEvent,
    TraceMetadata,
    event_id_to_string,
)
from .loader import load_trace, load_trace_from_stream

__all__ = [
    "CallFrame",
    "CPUProfile",
    "CPUProfileNode",
    "ProfileChunk",
    "TraceDocument",
    "TraceEvent",
    "TraceMetadata",
    "event_id_to_string",
    "load_trace",
    "load_trace_from_stream",
]
