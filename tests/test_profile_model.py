import io
import json

import pytest

from profconv.convert import convert_trace
from profconv.errors import ProfileFormatError
from profconv.profile import Category, Extensions, Meta, Profile, Thread, load_profile, load_profile_from_stream
from profconv.testing.traces import complete_event, make_document, profile_chunk_event, node, thread_name_event


def firefox_profile() -> dict:
    return {
        "meta": {
            "interval": 1.0,
            "startTime": 1704067200000.0,
            "profilingStartTime": 0.0,
            "profilingEndTime": 2500.0,
            "product": "Firefox",
            "version": 27,
            "categories": [
                {"name": "Idle", "color": "transparent", "subcategories": ["Other"]},
                {"name": "JavaScript", "color": "yellow", "subcategories": ["Other"]},
            ],
            "extensions": {
                "length": 2,
                "id": ["uBlock0@raymondhill.net", "addon@darkreader.org", "ignored"],
                "name": ["uBlock Origin", "Dark Reader", "ignored"],
                "baseURL": ["moz-extension://1/", "moz-extension://2/", "ignored"],
            },
        },
        "libs": [],
        "threads": [
            {
                "name": "GeckoMain",
                "isMainThread": True,
                "processType": "default",
                "pid": 10,
                "tid": 10,
                "markers": {
                    "length": 1,
                    "name": [0],
                    "category": [1],
                    "startTime": [5.0],
                    "endTime": [9.0],
                    "phase": [1],
                    "data": [{"type": "UserTiming"}],
                },
            },
            {"name": "DOM Worker", "isMainThread": False, "pid": 10, "tid": 11, "stringArray": ["own"]},
        ],
        "shared": {"stringArray": ["performance.measure"]},
    }


def test_from_dict_reads_meta():
    profile = Profile.from_dict(firefox_profile())

    assert profile.meta.product == "Firefox"
    assert profile.meta.version == 27
    assert profile.duration == 2500.0
    assert profile.duration_seconds == 2.5
    assert [c.name for c in profile.meta.categories] == ["Idle", "JavaScript"]


def test_extension_columns_truncated_to_length():
    profile = Profile.from_dict(firefox_profile())

    assert profile.extension_count == 2
    assert profile.extensions_by_id() == {
        "uBlock0@raymondhill.net": "uBlock Origin",
        "addon@darkreader.org": "Dark Reader",
    }
    assert profile.extension_base_urls()["addon@darkreader.org"] == "moz-extension://2/"


def test_threads_fall_back_to_shared_strings():
    profile = Profile.from_dict(firefox_profile())

    main, worker = profile.threads
    assert main.pid == "10"
    assert main.string_at(0) == "performance.measure"
    assert worker.string_array == ["own"]
    assert profile.main_threads() == [main]


@pytest.mark.parametrize("index, expected", [(0, "Idle"), (1, "JavaScript"), (2, None), (-1, None), ("1", None)])
def test_category_at(index, expected):
    profile = Profile.from_dict(firefox_profile())

    category = profile.category_at(index)
    assert (category.name if category else None) == expected


def test_string_at_out_of_range():
    thread = Thread(string_array=["a"])

    assert thread.string_at(0) == "a"
    assert thread.string_at(1) is None
    assert thread.string_at(None) is None


def test_extensions_add():
    extensions = Extensions()
    extensions.add("id1", "One", "chrome-extension://id1/")

    assert extensions.to_dict() == {
        "length": 1,
        "id": ["id1"],
        "name": ["One"],
        "baseURL": ["chrome-extension://id1/"],
    }


def test_meta_defaults():
    meta = Meta()

    assert meta.sample_units.time == "ms"
    assert meta.sample_units.thread_cpu_delta == "µs"
    assert meta.to_dict()["sampleUnits"] == {"time": "ms", "eventDelay": "ms", "threadCPUDelta": "µs"}


def test_converted_profile_survives_json(tmp_path):
    profile = convert_trace(make_document([
        thread_name_event("CrRendererMain"),
        complete_event("FunctionCall", ts=1_000_000, dur=5_000, args={"data": {"url": "x"}}),
        profile_chunk_event([node(1, "(root)"), node(2, "main", parent=1)], [1, 2], [100, 100], ts=1_000_000),
    ]))

    buffer = io.StringIO()
    profile.to_json(buffer, indent=2)
    loaded = load_profile_from_stream(io.StringIO(buffer.getvalue()))

    assert loaded.to_dict() == profile.to_dict()
    assert loaded.threads[0].stack_table.prefix == [None, 0]
    assert loaded.threads[0].markers.data == [{"data": {"url": "x"}}]


def test_output_json_keys():
    profile = convert_trace(make_document([complete_event("A", ts=1_000_000, dur=10)]))

    data = profile.to_dict()
    assert set(data) == {"meta", "libs", "threads"}
    thread = data["threads"][0]
    for key in ("stringArray", "samples", "markers", "stackTable", "frameTable", "funcTable", "processType"):
        assert key in thread
    assert thread["pid"] == "1"
    assert data["meta"]["categories"][0] == {"name": "Idle", "color": "transparent", "subcategories": ["Other"]}


def test_load_profile(profile_file):
    profile = load_profile(profile_file(firefox_profile()))

    assert profile.thread_count == 2


def test_load_gzip_profile(profile_file):
    profile = load_profile(profile_file(Profile.from_dict(firefox_profile()), gz=True))

    assert profile.meta.product == "Firefox"
    assert profile.threads[0].string_array == ["performance.measure"]


def test_load_profile_rejects_array(profile_file):
    with pytest.raises(ProfileFormatError):
        load_profile(profile_file([1, 2, 3]))


def test_load_profile_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_profile(tmp_path / "missing.json")


def test_lenient_profile_fields():
    profile = Profile.from_dict({
        "meta": {"interval": "fast", "categories": [{"name": "Other"}, "bad"]},
        "threads": [{"name": 3, "samples": "bad"}, "bad"],
        "libs": "bad",
    })

    assert profile.meta.interval == 1.0
    assert profile.meta.categories == [Category("Other", "", [])]
    assert profile.threads[0].name == ""
    assert profile.threads[0].samples.length == 0
    assert profile.libs == []
    assert json.loads(json.dumps(profile.to_dict()))["threads"][0]["processType"] == "tab"
