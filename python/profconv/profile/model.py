"""
Canonical columnar profile model.

The layout follows the processed Firefox profiler format: every thread owns a
string table and a set of parallel columns (one list per field) for its stacks,
frames, functions, samples and markers. Index columns use ``None`` for "no
row" (e.g. a root stack has no prefix).
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any

__all__ = [
    "Category",
    "Extensions",
    "SampleUnits",
    "Meta",
    "Samples",
    "Markers",
    "StackTable",
    "FrameTable",
    "FuncTable",
    "ResourceTable",
    "NativeSymbols",
    "Thread",
    "Profile",
    "MARKER_PHASE_INSTANT",
    "MARKER_PHASE_INTERVAL",
]


MARKER_PHASE_INSTANT = 0
MARKER_PHASE_INTERVAL = 1


def _list(data: Mapping, key: str) -> list:
    value = data.get(key)
    return list(value) if isinstance(value, list) else []


def _num(data: Mapping, key: str, default=0):
    value = data.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return default


def _text(data: Mapping, key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _mapping(data: Mapping, key: str) -> Mapping:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass
class Category:
    name: str
    color: str
    subcategories: list[str] = field(default_factory=lambda: ["Other"])

    def to_dict(self) -> dict:
        return {"name": self.name, "color": self.color, "subcategories": list(self.subcategories)}

    @classmethod
    def from_dict(cls, data: Mapping) -> "Category":
        return cls(
            name=_text(data, "name"),
            color=_text(data, "color"),
            subcategories=_list(data, "subcategories"),
        )


@dataclass
class Extensions:
    ids: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    base_urls: list[str] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.ids)

    def add(self, ext_id: str, name: str, base_url: str):
        self.ids.append(ext_id)
        self.names.append(name)
        self.base_urls.append(base_url)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "id": list(self.ids),
            "name": list(self.names),
            "baseURL": list(self.base_urls),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Extensions":
        ids = _list(data, "id")
        length = int(_num(data, "length", len(ids)))
        # length is authoritative when the columns are longer than it
        return cls(
            ids=ids[:length],
            names=_list(data, "name")[:length],
            base_urls=_list(data, "baseURL")[:length],
        )


@dataclass
class SampleUnits:
    time: str = "ms"
    event_delay: str = "ms"
    thread_cpu_delta: str = "µs"

    def to_dict(self) -> dict:
        return {"time": self.time, "eventDelay": self.event_delay, "threadCPUDelta": self.thread_cpu_delta}

    @classmethod
    def from_dict(cls, data: Mapping) -> "SampleUnits":
        return cls(
            time=_text(data, "time", "ms"),
            event_delay=_text(data, "eventDelay", "ms"),
            thread_cpu_delta=_text(data, "threadCPUDelta", "µs"),
        )


@dataclass
class Meta:
    interval: float = 1.0
    start_time: float = 0.0
    profiling_start_time: float = 0.0
    profiling_end_time: float = 0.0
    product: str = ""
    platform: str = ""
    version: int = 1
    categories: list[Category] = field(default_factory=list)
    extensions: Extensions = field(default_factory=Extensions)
    sample_units: SampleUnits = field(default_factory=SampleUnits)
    marker_schema: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "interval": self.interval,
            "startTime": self.start_time,
            "profilingStartTime": self.profiling_start_time,
            "profilingEndTime": self.profiling_end_time,
            "product": self.product,
            "platform": self.platform,
            "version": self.version,
            "categories": [c.to_dict() for c in self.categories],
            "extensions": self.extensions.to_dict(),
            "sampleUnits": self.sample_units.to_dict(),
            "markerSchema": list(self.marker_schema),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Meta":
        return cls(
            interval=_num(data, "interval", 1.0),
            start_time=_num(data, "startTime", 0.0),
            profiling_start_time=_num(data, "profilingStartTime", 0.0),
            profiling_end_time=_num(data, "profilingEndTime", 0.0),
            product=_text(data, "product"),
            platform=_text(data, "platform"),
            version=_num(data, "version", 1),
            categories=[Category.from_dict(c) for c in _list(data, "categories") if isinstance(c, Mapping)],
            extensions=Extensions.from_dict(_mapping(data, "extensions")),
            sample_units=SampleUnits.from_dict(_mapping(data, "sampleUnits")),
            marker_schema=[s for s in _list(data, "markerSchema") if isinstance(s, Mapping)],
        )


@dataclass
class Samples:
    stack: list[int | None] = field(default_factory=list)
    time: list[float] = field(default_factory=list)
    weight: list[int] = field(default_factory=list)
    thread_cpu_delta: list[int] = field(default_factory=list)
    weight_type: str = "samples"

    @property
    def length(self) -> int:
        return len(self.stack)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "stack": list(self.stack),
            "time": list(self.time),
            "weight": list(self.weight),
            "weightType": self.weight_type,
            "threadCPUDelta": list(self.thread_cpu_delta),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Samples":
        return cls(
            stack=_list(data, "stack"),
            time=_list(data, "time"),
            weight=_list(data, "weight"),
            thread_cpu_delta=_list(data, "threadCPUDelta"),
            weight_type=_text(data, "weightType", "samples"),
        )


@dataclass
class Markers:
    name: list[int] = field(default_factory=list)
    category: list[int] = field(default_factory=list)
    start_time: list[float] = field(default_factory=list)
    # floats for interval markers, None for instants; anything else is treated as no end
    end_time: list[Any] = field(default_factory=list)
    phase: list[int] = field(default_factory=list)
    data: list[Any] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.name)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "name": list(self.name),
            "category": list(self.category),
            "startTime": list(self.start_time),
            "endTime": list(self.end_time),
            "phase": list(self.phase),
            "data": list(self.data),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Markers":
        return cls(
            name=_list(data, "name"),
            category=_list(data, "category"),
            start_time=_list(data, "startTime"),
            end_time=_list(data, "endTime"),
            phase=_list(data, "phase"),
            data=_list(data, "data"),
        )


@dataclass
class StackTable:
    frame: list[int] = field(default_factory=list)
    category: list[int] = field(default_factory=list)
    prefix: list[int | None] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.frame)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "frame": list(self.frame),
            "category": list(self.category),
            "prefix": list(self.prefix),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "StackTable":
        return cls(
            frame=_list(data, "frame"),
            category=_list(data, "category"),
            prefix=_list(data, "prefix"),
        )


@dataclass
class FrameTable:
    func: list[int] = field(default_factory=list)
    category: list[int] = field(default_factory=list)
    subcategory: list[int] = field(default_factory=list)
    address: list[Any] = field(default_factory=list)
    inline_depth: list[int] = field(default_factory=list)
    native_symbol: list[Any] = field(default_factory=list)
    inner_window_id: list[Any] = field(default_factory=list)
    implementation: list[Any] = field(default_factory=list)
    line: list[Any] = field(default_factory=list)
    column: list[Any] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.func)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "func": list(self.func),
            "category": list(self.category),
            "subcategory": list(self.subcategory),
            "address": list(self.address),
            "inlineDepth": list(self.inline_depth),
            "nativeSymbol": list(self.native_symbol),
            "innerWindowID": list(self.inner_window_id),
            "implementation": list(self.implementation),
            "line": list(self.line),
            "column": list(self.column),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "FrameTable":
        return cls(
            func=_list(data, "func"),
            category=_list(data, "category"),
            subcategory=_list(data, "subcategory"),
            address=_list(data, "address"),
            inline_depth=_list(data, "inlineDepth"),
            native_symbol=_list(data, "nativeSymbol"),
            inner_window_id=_list(data, "innerWindowID"),
            implementation=_list(data, "implementation"),
            line=_list(data, "line"),
            column=_list(data, "column"),
        )


@dataclass
class FuncTable:
    name: list[int] = field(default_factory=list)
    is_js: list[bool] = field(default_factory=list)
    relevant_for_js: list[bool] = field(default_factory=list)
    resource: list[int | None] = field(default_factory=list)
    file_name: list[int | None] = field(default_factory=list)
    line_number: list[int | None] = field(default_factory=list)
    column_number: list[int | None] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.name)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "name": list(self.name),
            "isJS": list(self.is_js),
            "relevantForJS": list(self.relevant_for_js),
            "resource": list(self.resource),
            "fileName": list(self.file_name),
            "lineNumber": list(self.line_number),
            "columnNumber": list(self.column_number),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "FuncTable":
        return cls(
            name=_list(data, "name"),
            is_js=_list(data, "isJS"),
            relevant_for_js=_list(data, "relevantForJS"),
            resource=_list(data, "resource"),
            file_name=_list(data, "fileName"),
            line_number=_list(data, "lineNumber"),
            column_number=_list(data, "columnNumber"),
        )


@dataclass
class ResourceTable:
    lib: list[int] = field(default_factory=list)
    name: list[int] = field(default_factory=list)
    host: list[int | None] = field(default_factory=list)
    type: list[int] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.name)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "lib": list(self.lib),
            "name": list(self.name),
            "host": list(self.host),
            "type": list(self.type),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ResourceTable":
        return cls(
            lib=_list(data, "lib"),
            name=_list(data, "name"),
            host=_list(data, "host"),
            type=_list(data, "type"),
        )


@dataclass
class NativeSymbols:
    address: list[Any] = field(default_factory=list)
    function_size: list[Any] = field(default_factory=list)
    lib_index: list[int] = field(default_factory=list)
    name: list[int] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.name)

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "address": list(self.address),
            "functionSize": list(self.function_size),
            "libIndex": list(self.lib_index),
            "name": list(self.name),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "NativeSymbols":
        return cls(
            address=_list(data, "address"),
            function_size=_list(data, "functionSize"),
            lib_index=_list(data, "libIndex"),
            name=_list(data, "name"),
        )


@dataclass
class Thread:
    name: str = ""
    pid: str = ""
    tid: str = ""
    process_name: str = ""
    process_type: str = "tab"
    is_main_thread: bool = False
    process_startup_time: float = 0.0
    process_shutdown_time: float | None = None
    register_time: float = 0.0
    unregister_time: float | None = None
    string_array: list[str] = field(default_factory=list)
    samples: Samples = field(default_factory=Samples)
    markers: Markers = field(default_factory=Markers)
    stack_table: StackTable = field(default_factory=StackTable)
    frame_table: FrameTable = field(default_factory=FrameTable)
    func_table: FuncTable = field(default_factory=FuncTable)
    resource_table: ResourceTable = field(default_factory=ResourceTable)
    native_symbols: NativeSymbols = field(default_factory=NativeSymbols)

    def string_at(self, index) -> str | None:
        if isinstance(index, int) and 0 <= index < len(self.string_array):
            return self.string_array[index]
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "isMainThread": self.is_main_thread,
            "processType": self.process_type,
            "processName": self.process_name,
            "processStartupTime": self.process_startup_time,
            "processShutdownTime": self.process_shutdown_time,
            "registerTime": self.register_time,
            "unregisterTime": self.unregister_time,
            "pid": self.pid,
            "tid": self.tid,
            "stringArray": list(self.string_array),
            "samples": self.samples.to_dict(),
            "markers": self.markers.to_dict(),
            "stackTable": self.stack_table.to_dict(),
            "frameTable": self.frame_table.to_dict(),
            "funcTable": self.func_table.to_dict(),
            "resourceTable": self.resource_table.to_dict(),
            "nativeSymbols": self.native_symbols.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping, shared_strings: list[str] | None = None) -> "Thread":
        strings = _list(data, "stringArray")
        if not strings and shared_strings:
            strings = list(shared_strings)
        shutdown = data.get("processShutdownTime")
        unregister = data.get("unregisterTime")
        return cls(
            name=_text(data, "name"),
            pid=str(data.get("pid", "")),
            tid=str(data.get("tid", "")),
            process_name=_text(data, "processName"),
            process_type=_text(data, "processType", "tab"),
            is_main_thread=bool(data.get("isMainThread", False)),
            process_startup_time=_num(data, "processStartupTime", 0.0),
            process_shutdown_time=shutdown if isinstance(shutdown, (int, float)) else None,
            register_time=_num(data, "registerTime", 0.0),
            unregister_time=unregister if isinstance(unregister, (int, float)) else None,
            string_array=strings,
            samples=Samples.from_dict(_mapping(data, "samples")),
            markers=Markers.from_dict(_mapping(data, "markers")),
            stack_table=StackTable.from_dict(_mapping(data, "stackTable")),
            frame_table=FrameTable.from_dict(_mapping(data, "frameTable")),
            func_table=FuncTable.from_dict(_mapping(data, "funcTable")),
            resource_table=ResourceTable.from_dict(_mapping(data, "resourceTable")),
            native_symbols=NativeSymbols.from_dict(_mapping(data, "nativeSymbols")),
        )


@dataclass
class Profile:
    meta: Meta = field(default_factory=Meta)
    threads: list[Thread] = field(default_factory=list)
    libs: list[dict] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Profile duration in milliseconds."""
        return self.meta.profiling_end_time - self.meta.profiling_start_time

    @property
    def duration_seconds(self) -> float:
        return self.duration / 1000.0

    @property
    def extension_count(self) -> int:
        return self.meta.extensions.length

    @property
    def thread_count(self) -> int:
        return len(self.threads)

    def extensions_by_id(self) -> dict[str, str]:
        ext = self.meta.extensions
        return dict(zip(ext.ids, ext.names))

    def extension_base_urls(self) -> dict[str, str]:
        ext = self.meta.extensions
        return dict(zip(ext.ids, ext.base_urls))

    def category_at(self, index) -> Category | None:
        if isinstance(index, int) and 0 <= index < len(self.meta.categories):
            return self.meta.categories[index]
        return None

    def main_threads(self) -> list[Thread]:
        return [t for t in self.threads if t.is_main_thread]

    def to_dict(self) -> dict:
        return {
            "meta": self.meta.to_dict(),
            "libs": list(self.libs),
            "threads": [t.to_dict() for t in self.threads],
        }

    def to_json(self, fp: IO[str], indent: int | None = None):
        json.dump(self.to_dict(), fp, indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping) -> "Profile":
        shared = _list(_mapping(data, "shared"), "stringArray")
        return cls(
            meta=Meta.from_dict(_mapping(data, "meta")),
            threads=[Thread.from_dict(t, shared) for t in _list(data, "threads") if isinstance(t, Mapping)],
            libs=[lib for lib in _list(data, "libs") if isinstance(lib, Mapping)],
        )
