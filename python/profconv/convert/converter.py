"""
Chrome trace to canonical profile conversion.

The converter runs five full passes over the event list, in order:

1. thread and process names from metadata events
2. time range, duration / instant / mark markers
3. profiling session id -> profiled thread table from ``Profile`` events
4. stacks and samples from the CPU profiles in ``ProfileChunk`` events
5. assembly of the output profile

Pass 4 relies on the table built by pass 3: ``ProfileChunk`` events are emitted
by the sampler thread, the samples belong to the thread named by the matching
``Profile`` event.
"""

import contextlib
import logging
from collections.abc import Mapping
from datetime import datetime, timezone

from ..performance import ScenarioLog
from ..profile.model import Extensions, Meta, Profile
from ..trace.events import (
    PHASE_COMPLETE,
    PHASE_INSTANT,
    PHASE_MARK,
    PHASE_METADATA,
    PHASE_SAMPLE,
    ProfileChunk,
    TraceDocument,
    TraceEvent,
    event_id_to_string,
)
from .categories import EXTENSION_URL_PREFIX, CategoryMapper
from .tables import ThreadBuilder

__all__ = [
    "TRACING_STARTED_EVENT",
    "TraceConverter",
    "convert_trace",
]

logger = logging.getLogger("Profconv-convert")


TRACING_STARTED_EVENT = "TracingStartedInBrowser"
SESSION_START_EVENT = "Profile"
SESSION_CHUNK_EVENT = "ProfileChunk"

# trace timestamps are in microseconds, profile times in milliseconds
US_PER_MS = 1000.0


def parse_start_time(value: str) -> float:
    """
    Convert an RFC 3339 timestamp to milliseconds since the epoch, ``0`` when
    it is empty or cannot be parsed.
    """
    if not value:
        return 0.0
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return float(int(parsed.timestamp() * 1000))


def _marker_data(args):
    # empty payloads ({} or []) carry no information
    if args is None or (isinstance(args, (Mapping, list, str)) and len(args) == 0):
        return None
    return args


class TraceConverter:
    """
    Convert one :class:`TraceDocument` into a :class:`Profile`.

    A converter instance is single use, call :meth:`convert` once.
    """

    def __init__(self, document: TraceDocument, scenario: ScenarioLog | None = None):
        self.document = document
        self.scenario = scenario
        self.mapper = CategoryMapper()

        self.threads: dict[tuple[int, int], ThreadBuilder] = {}
        self.process_names: dict[int, str] = {}
        self.session_targets: dict[str, tuple[int, int]] = {}

        self.origin: float | None = None
        self.max_time = 0.0

    def _phase(self, name: str):
        if self.scenario is None:
            return contextlib.nullcontext()
        return self.scenario.event(name)

    def convert(self) -> Profile:
        events = self.document.events
        logger.debug("Converting trace with %d events", len(events))

        with self._phase("metadata"):
            self.extract_metadata(events)
        with self._phase("markers"):
            self.resolve_time_origin(events)
            self.process_events(events)
        with self._phase("sessions"):
            self.build_session_targets(events)
        with self._phase("samples"):
            self.extract_cpu_profiles(events)
        with self._phase("assemble"):
            profile = self.assemble()

        logger.debug(
            "Converted trace into %d threads spanning %.3f ms",
            profile.thread_count, profile.duration,
        )
        return profile

    def thread(self, pid: int, tid: int) -> ThreadBuilder:
        builder = self.threads.get((pid, tid))
        if builder is None:
            builder = self.threads[(pid, tid)] = ThreadBuilder(pid, tid)
        return builder

    def relative_ms(self, ts: float) -> float:
        return (ts - (self.origin or 0.0)) / US_PER_MS

    # pass 1

    def extract_metadata(self, events: list[TraceEvent]):
        for event in events:
            if event.ph != PHASE_METADATA:
                continue
            if event.name not in ("thread_name", "process_name"):
                continue
            name = event.args.get("name") if isinstance(event.args, Mapping) else None
            if not isinstance(name, str) or not name:
                continue
            if event.name == "thread_name":
                self.thread(event.pid, event.tid).name = name
            else:
                self.process_names[event.pid] = name

    # pass 2

    def resolve_time_origin(self, events: list[TraceEvent]):
        """
        Pick the time origin: the ``TracingStartedInBrowser`` marker when present,
        otherwise the earliest positive timestamp. Metadata events have ``ts == 0``
        and never count.
        """
        for event in events:
            if event.name == TRACING_STARTED_EVENT and event.ts > 0:
                self.origin = event.ts
                return
        positive = [event.ts for event in events if event.ts > 0]
        self.origin = min(positive) if positive else None

    def process_events(self, events: list[TraceEvent]):
        for event in events:
            if event.ts > 0:
                self.max_time = max(self.max_time, event.ts + event.dur)

            if event.ph == PHASE_COMPLETE:
                self.handle_complete(event)
            elif event.ph in (PHASE_INSTANT, PHASE_MARK):
                self.handle_instant(event)

    def handle_complete(self, event: TraceEvent):
        start = self.relative_ms(event.ts)
        duration = max(event.dur, 0.0) / US_PER_MS
        self.thread(event.pid, event.tid).add_marker(
            event.name,
            self.mapper.map_tags(event.cat),
            start,
            start + duration,
            _marker_data(event.args),
        )

    def handle_instant(self, event: TraceEvent):
        self.thread(event.pid, event.tid).add_marker(
            event.name,
            self.mapper.map_tags(event.cat),
            self.relative_ms(event.ts),
            None,
            _marker_data(event.args),
        )

    # pass 3

    def build_session_targets(self, events: list[TraceEvent]):
        for event in events:
            if event.ph != PHASE_SAMPLE or event.name != SESSION_START_EVENT:
                continue
            session_id = event_id_to_string(event.id)
            if not session_id:
                continue
            if session_id in self.session_targets:
                logger.debug("Ignoring repeated profiling session start for id '%s'", session_id)
                continue
            self.session_targets[session_id] = event.thread_key

    # pass 4

    def extract_cpu_profiles(self, events: list[TraceEvent]):
        for event in events:
            if event.name != SESSION_CHUNK_EVENT:
                continue
            chunk = ProfileChunk.from_args(event.args)
            if chunk is None:
                logger.debug("Skipping ProfileChunk without data at ts=%s", event.ts)
                continue
            if chunk.cpu_profile.is_empty:
                continue

            session_id = event_id_to_string(event.id)
            pid, tid = self.session_targets.get(session_id, event.thread_key)
            self.add_cpu_profile(self.thread(pid, tid), chunk, event.ts)

    def add_cpu_profile(self, builder: ThreadBuilder, chunk: ProfileChunk, base_ts: float):
        # node lists are flat, a parent always precedes its children
        node_stacks: dict[int, int] = {}
        for node in chunk.cpu_profile.nodes:
            frame = node.call_frame
            category = self.mapper.for_call_frame(frame)
            func = builder.add_func(frame)
            frame_index = builder.add_frame(func, category)
            prefix = node_stacks.get(node.parent) if node.parent > 0 else None
            node_stacks[node.id] = builder.add_stack(frame_index, prefix, category)

        deltas = chunk.effective_time_deltas()
        current = self.relative_ms(base_ts)
        for i, node_id in enumerate(chunk.cpu_profile.samples):
            delta_us = deltas[i] if i < len(deltas) else 0.0
            builder.add_sample(node_stacks.get(node_id), current, int(delta_us))
            current += delta_us / US_PER_MS

    # pass 5

    def build_extensions(self) -> Extensions:
        extensions = Extensions()
        for ext_id in self.mapper.extension_ids:
            # traces carry no extension manifest, the id doubles as the name
            extensions.add(ext_id, ext_id, f"{EXTENSION_URL_PREFIX}{ext_id}/")
        return extensions

    def assemble(self) -> Profile:
        for builder in self.threads.values():
            process_name = self.process_names.get(builder.pid)
            if process_name is not None:
                builder.process_name = process_name

        threads = [self.threads[key].finish() for key in sorted(self.threads)]

        if self.origin is None:
            duration = 0.0
        else:
            duration = (self.max_time - self.origin) / US_PER_MS

        meta = Meta(
            interval=1.0,
            start_time=parse_start_time(self.document.metadata.start_time),
            profiling_start_time=0.0,
            profiling_end_time=duration,
            product="Chrome",
            platform="Chrome DevTools",
            version=1,
            categories=self.mapper.categories,
            extensions=self.build_extensions(),
        )
        return Profile(meta=meta, threads=threads)


def convert_trace(document: TraceDocument, scenario: ScenarioLog | None = None) -> Profile:
    return TraceConverter(document, scenario).convert()
