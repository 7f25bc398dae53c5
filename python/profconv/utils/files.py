"""Helpers for reading possibly compressed JSON files."""

import gzip
import json
import os
import zlib
from pathlib import Path
from typing import IO

__all__ = [
    "GZIP_SUFFIXES",
    "is_gzip_path",
    "load_json",
    "read_json",
]


GZIP_SUFFIXES = (".gz", ".gzip")


def is_gzip_path(path: str | os.PathLike) -> bool:
    return Path(path).suffix.lower() in GZIP_SUFFIXES


def load_json(fp: IO, error_cls: type[Exception], source: str = "<stream>"):
    """
    Decode one JSON document from an open stream.

    ``NaN`` and ``Infinity`` tokens are not JSON and are rejected like any other
    malformed input.

    Raises:
        error_cls: If the content is not valid JSON.
    """

    def reject_constant(token):
        raise error_cls(f"Invalid number '{token}' in '{source}'")

    try:
        return json.load(fp, parse_constant=reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise error_cls(f"Failed to decode JSON in '{source}': {e}") from e


def read_json(path: str | os.PathLike, error_cls: type[Exception]):
    """
    Decode the JSON document stored at ``path``.

    Files ending in ``.gz`` or ``.gzip`` are decompressed on the fly.

    Args:
        path: File to read.
        error_cls: Exception type raised for decompression or decode failures.

    Raises:
        FileNotFoundError, OSError: If the file cannot be opened or read.
        error_cls: If the content is not valid (compressed) JSON.
    """
    path = Path(path)
    if is_gzip_path(path):
        try:
            with gzip.open(path, "rt", encoding="utf-8") as fp:
                return load_json(fp, error_cls, str(path))
        except (gzip.BadGzipFile, EOFError, zlib.error) as e:
            raise error_cls(f"Failed to decompress '{path}': {e}") from e

    with open(path, "r", encoding="utf-8") as fp:
        return load_json(fp, error_cls, str(path))
