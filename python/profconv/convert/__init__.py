from .categories import CategoryMapper, default_categories, extract_extension_id
from .converter import TraceConverter, convert_trace
from .tables import StringTable, ThreadBuilder

__all__ = [
    "CategoryMapper",
    "StringTable",
    "ThreadBuilder",
    "TraceConverter",
    "convert_trace",
    "default_categories",
    "extract_extension_id",
]
