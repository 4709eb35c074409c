# Coordinate transforms
from .gcj02 import (
    gcj02_to_wgs84,
    gcj02_to_wgs84_exact,
    offset_distance,
    out_of_china,
    transform_geometry,
    wgs84_to_gcj02,
)

__all__ = [
    "gcj02_to_wgs84",
    "gcj02_to_wgs84_exact",
    "offset_distance",
    "out_of_china",
    "transform_geometry",
    "wgs84_to_gcj02",
]
