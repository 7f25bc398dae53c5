"""
Mapping of Chrome trace categories onto the canonical profile categories.
"""

from ..profile.model import Category
from ..trace.events import CallFrame

__all__ = [
    "CHROME_CATEGORY_MAP",
    "EXTENSION_URL_PREFIX",
    "CategoryMapper",
    "default_categories",
    "extract_extension_id",
]


EXTENSION_URL_PREFIX = "chrome-extension://"

# Chrome extension ids are always 32 characters ([a-p]{32})
EXTENSION_ID_LENGTH = 32

CHROME_CATEGORY_MAP = {
    "devtools.timeline": "JavaScript",
    "disabled-by-default-devtools.timeline": "Other",
    "disabled-by-default-devtools.timeline.frame": "Graphics",
    "disabled-by-default-devtools.timeline.stack": "JavaScript",
    "v8": "JavaScript",
    "v8.execute": "JavaScript",
    "v8.compile": "JavaScript",
    "disabled-by-default-v8.gc": "GC / CC",
    "disabled-by-default-v8.cpu_profiler": "JavaScript",
    "blink": "Layout",
    "blink.user_timing": "UserTiming",
    "blink.console": "JavaScript",
    "loading": "Network",
    "net": "Network",
    "netlog": "Network",
    "gpu": "Graphics",
    "cc": "Graphics",
    "viz": "Graphics",
    "benchmark": "Other",
    "rail": "Other",
    "__metadata": "Other",
    "toplevel": "Other",
    "ipc": "IPC",
}

SYNTHETIC_FUNCTION_NAMES = ("(root)", "(program)")


def default_categories() -> list[Category]:
    return [
        Category("Idle", "transparent"),
        Category("Other", "grey"),
        Category("Layout", "purple"),
        Category("JavaScript", "yellow"),
        Category("GC / CC", "orange"),
        Category("Network", "lightblue"),
        Category("Graphics", "green"),
        Category("DOM", "blue"),
        Category("UserTiming", "yellow"),
        Category("IPC", "lightgreen"),
    ]


def extract_extension_id(url: str) -> str | None:
    """
    Return the extension id embedded in a ``chrome-extension://<id>/...`` URL.

    >>> extract_extension_id("chrome-extension://abcdefghijklmnopabcdefghijklmnop/bg.js")
    'abcdefghijklmnopabcdefghijklmnop'
    """
    if not url.startswith(EXTENSION_URL_PREFIX):
        return None
    ext_id = url[len(EXTENSION_URL_PREFIX):].split("/", 1)[0]
    if len(ext_id) != EXTENSION_ID_LENGTH:
        return None
    return ext_id


class CategoryMapper:
    """
    Resolves category indices for trace events and CPU profile call frames.

    Extension ids seen while classifying call frames are collected in first-seen
    order in ``extension_ids``.
    """

    def __init__(self, categories: list[Category] | None = None):
        self.categories = categories if categories is not None else default_categories()
        self._index = {c.name: i for i, c in enumerate(self.categories)}
        self.extension_ids: dict[str, None] = {}

    def index_of(self, name: str) -> int:
        return self._index[name]

    @property
    def other(self) -> int:
        return self._index["Other"]

    @property
    def javascript(self) -> int:
        return self._index["JavaScript"]

    def map_tags(self, cat: str) -> int:
        """Map a comma separated Chrome category string, first known tag wins."""
        for tag in cat.split(","):
            name = CHROME_CATEGORY_MAP.get(tag.strip())
            if name is not None and name in self._index:
                return self._index[name]
        return self.other

    def for_call_frame(self, frame: CallFrame) -> int:
        url = frame.url
        if EXTENSION_URL_PREFIX in url:
            ext_id = extract_extension_id(url)
            if ext_id is not None:
                self.extension_ids.setdefault(ext_id)
            return self.other
        if url.startswith("http") or url.startswith("file"):
            return self.javascript
        if frame.code_type == "other" or frame.function_name in SYNTHETIC_FUNCTION_NAMES:
            return self.other
        return self.javascript
