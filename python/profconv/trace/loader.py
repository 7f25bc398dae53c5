import os
from typing import IO

from ..errors import TraceFormatError
from ..utils.files import load_json, read_json
from .events import TraceDocument

__all__ = [
    "load_trace",
    "load_trace_from_stream",
]


def load_trace(path: str | os.PathLike) -> TraceDocument:
    """
    Load a Chrome trace file, optionally gzip compressed.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        TraceFormatError: If the file is not a valid trace document.
    """
    return TraceDocument.from_json(read_json(path, TraceFormatError))


def load_trace_from_stream(fp: IO) -> TraceDocument:
    return TraceDocument.from_json(load_json(fp, TraceFormatError))
