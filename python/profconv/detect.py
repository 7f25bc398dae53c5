"""
Detection of the input profile format and format-aware loading.

Two formats are understood: canonical (Firefox processed) profiles, which are
loaded as-is, and Chrome traces, which are converted on load.
"""

import enum
import logging
import os
from collections.abc import Mapping

from .convert import convert_trace
from .errors import ProfileFormatError, TraceFormatError
from .performance import ScenarioLog
from .profile import Profile
from .profile.loader import load_profile
from .trace import TraceDocument
from .utils.files import read_json

__all__ = [
    "ProfileFormat",
    "detect_format",
    "detect_format_from_json",
    "load_any",
]

logger = logging.getLogger("Profconv-detect")


class ProfileFormat(str, enum.Enum):
    FIREFOX = "firefox"
    CHROME = "chrome"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str) -> "ProfileFormat":
        """Parse a user supplied format name, ``auto`` and unknown names give ``UNKNOWN``."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN


def detect_format_from_json(data) -> ProfileFormat:
    if isinstance(data, list):
        return ProfileFormat.CHROME if data else ProfileFormat.UNKNOWN
    if not isinstance(data, Mapping):
        return ProfileFormat.UNKNOWN

    threads = data.get("threads")
    if isinstance(data.get("meta"), Mapping) and isinstance(threads, list) and threads:
        return ProfileFormat.FIREFOX

    events = data.get("traceEvents")
    if isinstance(events, list) and events:
        return ProfileFormat.CHROME

    return ProfileFormat.UNKNOWN


def detect_format(path: str | os.PathLike) -> ProfileFormat:
    """
    Classify the file at ``path`` by peeking at its top-level keys.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ProfileFormatError: If the file is not valid (compressed) JSON.
    """
    return detect_format_from_json(read_json(path, ProfileFormatError))


def _convert(data, scenario: ScenarioLog | None) -> Profile:
    return convert_trace(TraceDocument.from_json(data), scenario)


def load_any(
    path: str | os.PathLike,
    fmt: ProfileFormat = ProfileFormat.UNKNOWN,
    scenario: ScenarioLog | None = None,
) -> tuple[Profile, ProfileFormat]:
    """
    Load ``path`` as a canonical profile, converting Chrome traces on the fly.

    With ``fmt`` left to ``UNKNOWN`` the format is detected first; when detection
    is inconclusive both loaders are tried, canonical first.

    Returns:
        The profile and the format it was read as.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ProfileFormatError: If the file cannot be read as either format.
    """
    if fmt == ProfileFormat.FIREFOX:
        return load_profile(path), ProfileFormat.FIREFOX

    data = read_json(path, ProfileFormatError)

    if fmt == ProfileFormat.UNKNOWN:
        fmt = detect_format_from_json(data)
        logger.debug("Detected format '%s' for '%s'", fmt.value, path)

    if fmt == ProfileFormat.FIREFOX:
        if not isinstance(data, Mapping):
            raise ProfileFormatError(f"Profile '{path}' is not a JSON object")
        return Profile.from_dict(data), ProfileFormat.FIREFOX
    if fmt == ProfileFormat.CHROME:
        return _convert(data, scenario), ProfileFormat.CHROME

    # inconclusive: any object reads as a (possibly empty) canonical profile
    if isinstance(data, Mapping):
        return Profile.from_dict(data), ProfileFormat.FIREFOX
    try:
        return _convert(data, scenario), ProfileFormat.CHROME
    except TraceFormatError as e:
        raise ProfileFormatError(f"failed to parse '{path}' as any known format: {e}") from e
