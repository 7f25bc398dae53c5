import pytest

from profconv.convert import StringTable, ThreadBuilder
from profconv.profile.model import MARKER_PHASE_INSTANT, MARKER_PHASE_INTERVAL
from profconv.trace import CallFrame


def test_string_table_interning():
    table = StringTable()

    assert table.intern("a") == 0
    assert table.intern("b") == 1
    assert table.intern("a") == 0
    assert table.intern("") == 2
    assert table.strings == ["a", "b", ""]
    assert len(table) == 3


def test_func_dedup_key():
    builder = ThreadBuilder(1, 1)

    first = builder.add_func(CallFrame("main", url="", line_number=3, column_number=1))
    same_unknown = builder.add_func(CallFrame("main", url="(unknown)", line_number=3, column_number=9))
    other_line = builder.add_func(CallFrame("main", url="", line_number=4))

    assert first == same_unknown == 0
    assert other_line == 1
    assert builder.funcs.column_number == [1, 0]
    assert builder.strings.strings == ["main", "(unknown)"]


def test_frame_dedup_by_category():
    builder = ThreadBuilder(1, 1)
    func = builder.add_func(CallFrame("f"))

    assert builder.add_frame(func, 3) == 0
    assert builder.add_frame(func, 3) == 0
    assert builder.add_frame(func, 1) == 1
    assert builder.frames.length == 2


def test_stack_dedup_and_prefix():
    builder = ThreadBuilder(1, 1)
    frame = builder.add_frame(builder.add_func(CallFrame("f")), 3)

    root = builder.add_stack(frame, None, 3)
    child = builder.add_stack(frame, root, 3)

    assert (root, child) == (0, 1)
    assert builder.add_stack(frame, root, 3) == child
    assert builder.stacks.prefix == [None, 0]


@pytest.mark.parametrize("prefix", [0, 5, -1])
def test_stack_prefix_must_exist(prefix):
    builder = ThreadBuilder(1, 1)

    with pytest.raises(ValueError):
        builder.add_stack(0, prefix, 1)


def test_markers_phase_follows_end():
    builder = ThreadBuilder(1, 1)
    builder.add_marker("a", 1, 0.0, 2.0, None)
    builder.add_marker("b", 1, 1.0, None, {"x": 1})

    assert builder.markers.phase == [MARKER_PHASE_INTERVAL, MARKER_PHASE_INSTANT]
    assert builder.markers.data == [None, {"x": 1}]


def test_finish_builds_thread():
    builder = ThreadBuilder(12, 34)
    builder.name = "CrRendererMain"
    builder.process_name = "Renderer"
    builder.add_sample(None, 0.0, 0)

    thread = builder.finish()

    assert (thread.pid, thread.tid) == ("12", "34")
    assert thread.is_main_thread
    assert thread.process_type == "tab"
    assert thread.samples.stack == [None]
    assert builder.key == (12, 34)
