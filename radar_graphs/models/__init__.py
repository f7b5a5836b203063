from .series import Bounds, Point, SchemaMap, Series

__all__ = [
    "Bounds",
    "Point",
    "SchemaMap",
    "Series",
]
