import os
from collections.abc import Mapping
from typing import IO

from ..errors import ProfileFormatError
from ..utils.files import load_json, read_json
from .model import Profile

__all__ = [
    "load_profile",
    "load_profile_from_stream",
]


def _to_profile(data) -> Profile:
    if not isinstance(data, Mapping):
        raise ProfileFormatError(
            f"Profile must be a JSON object, got {type(data).__name__}"
        )
    return Profile.from_dict(data)


def load_profile(path: str | os.PathLike) -> Profile:
    """
    Load a canonical (Firefox processed) profile, optionally gzip compressed.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ProfileFormatError: If the file is not a valid profile document.
    """
    return _to_profile(read_json(path, ProfileFormatError))


def load_profile_from_stream(fp: IO) -> Profile:
    return _to_profile(load_json(fp, ProfileFormatError))
