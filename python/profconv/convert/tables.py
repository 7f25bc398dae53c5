"""
Per-thread accumulators used while converting a trace.

Every output thread owns a private string table and private dedup maps, rows are
never shared between threads.
"""

from typing import Any

from ..profile.model import (
    MARKER_PHASE_INSTANT,
    MARKER_PHASE_INTERVAL,
    FrameTable,
    FuncTable,
    Markers,
    Samples,
    StackTable,
    Thread,
)
from ..trace.events import CallFrame

__all__ = [
    "UNKNOWN_URL",
    "StringTable",
    "ThreadBuilder",
]


UNKNOWN_URL = "(unknown)"


class StringTable:
    def __init__(self):
        self.strings: list[str] = []
        self._positions: dict[str, int] = {}

    def __len__(self):
        return len(self.strings)

    def intern(self, text: str) -> int:
        index = self._positions.get(text)
        if index is None:
            index = len(self.strings)
            self.strings.append(text)
            self._positions[text] = index
        return index


class ThreadBuilder:
    """
    Growing columns for one (pid, tid) pair.

    Function, frame and stack rows are deduplicated on the keys
    ``(name, url, line)``, ``(func, category)`` and ``(frame, prefix)``.
    """

    def __init__(self, pid: int, tid: int):
        self.pid = pid
        self.tid = tid
        self.name = ""
        self.process_name = ""
        self.strings = StringTable()

        self.markers = Markers()
        self.samples = Samples()
        self.stacks = StackTable()
        self.frames = FrameTable()
        self.funcs = FuncTable()

        self._func_positions: dict[tuple[str, str, int], int] = {}
        self._frame_positions: dict[tuple[int, int], int] = {}
        self._stack_positions: dict[tuple[int, int | None], int] = {}

    @property
    def key(self) -> tuple[int, int]:
        return (self.pid, self.tid)

    def add_marker(self, name: str, category: int, start: float, end: float | None, data: Any):
        m = self.markers
        m.name.append(self.strings.intern(name))
        m.category.append(category)
        m.start_time.append(start)
        m.end_time.append(end)
        m.phase.append(MARKER_PHASE_INSTANT if end is None else MARKER_PHASE_INTERVAL)
        m.data.append(data)

    def add_func(self, frame: CallFrame) -> int:
        url = frame.url or UNKNOWN_URL
        key = (frame.function_name, url, frame.line_number)
        index = self._func_positions.get(key)
        if index is not None:
            return index

        f = self.funcs
        index = f.length
        f.name.append(self.strings.intern(frame.function_name))
        f.is_js.append(True)
        f.relevant_for_js.append(True)
        f.resource.append(None)
        f.file_name.append(self.strings.intern(url))
        f.line_number.append(frame.line_number)
        f.column_number.append(frame.column_number)
        self._func_positions[key] = index
        return index

    def add_frame(self, func: int, category: int) -> int:
        key = (func, category)
        index = self._frame_positions.get(key)
        if index is not None:
            return index

        f = self.frames
        index = f.length
        f.func.append(func)
        f.category.append(category)
        f.subcategory.append(0)
        # a trace carries no native information for JS frames
        f.address.append(None)
        f.inline_depth.append(0)
        f.native_symbol.append(None)
        f.inner_window_id.append(None)
        f.implementation.append(None)
        f.line.append(None)
        f.column.append(None)
        self._frame_positions[key] = index
        return index

    def add_stack(self, frame: int, prefix: int | None, category: int) -> int:
        if prefix is not None and not 0 <= prefix < self.stacks.length:
            raise ValueError(f"Stack prefix {prefix} does not reference an existing stack")

        key = (frame, prefix)
        index = self._stack_positions.get(key)
        if index is not None:
            return index

        s = self.stacks
        index = s.length
        s.frame.append(frame)
        s.category.append(category)
        s.prefix.append(prefix)
        self._stack_positions[key] = index
        return index

    def add_sample(self, stack: int | None, time: float, cpu_delta: int):
        s = self.samples
        s.stack.append(stack)
        s.time.append(time)
        s.weight.append(1)
        s.thread_cpu_delta.append(cpu_delta)

    @property
    def is_main_thread(self) -> bool:
        return "Main" in self.name

    @property
    def process_type(self) -> str:
        if "Browser" in self.process_name:
            return "default"
        if "GPU" in self.process_name:
            return "gpu"
        if "Extension" in self.process_name:
            return "extension"
        return "tab"

    def finish(self) -> Thread:
        return Thread(
            name=self.name,
            pid=str(self.pid),
            tid=str(self.tid),
            process_name=self.process_name,
            process_type=self.process_type,
            is_main_thread=self.is_main_thread,
            string_array=list(self.strings.strings),
            samples=self.samples,
            markers=self.markers,
            stack_table=self.stacks,
            frame_table=self.frames,
            func_table=self.funcs,
        )
