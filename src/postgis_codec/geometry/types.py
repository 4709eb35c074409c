"""
In-memory geometry model shared by the EWKB and TWKB codecs.

Seven immutable variants (Point, LineString, Polygon, MultiPoint,
MultiLineString, MultiPolygon, GeometryCollection) form a closed set that the
codecs dispatch over with GeometryType, the type-code enumeration both wire
formats use. Every point may carry Z and M; presence is uniform across one
geometry and is reported by dimensions().
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from itertools import chain
from typing import Callable, Iterable, Iterator, Optional, Union

from ..errors import DimensionMismatchError


class GeometryType(IntEnum):
    """Geometry type codes used by WKB, EWKB and TWKB."""
    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOINT = 4
    MULTILINESTRING = 5
    MULTIPOLYGON = 6
    GEOMETRYCOLLECTION = 7


@dataclass(frozen=True)
class Dimensions:
    """Presence of the optional Z and M ordinates."""
    has_z: bool = False
    has_m: bool = False

    @property
    def count(self) -> int:
        return 2 + self.has_z + self.has_m

    @property
    def label(self) -> str:
        return "XY" + ("Z" if self.has_z else "") + ("M" if self.has_m else "")


XY = Dimensions()
XYZ = Dimensions(has_z=True)
XYM = Dimensions(has_m=True)
XYZM = Dimensions(has_z=True, has_m=True)


def _same(a: Optional[float], b: Optional[float]) -> bool:
    if a is None or b is None:
        return a is b
    return a == b or (math.isnan(a) and math.isnan(b))


@dataclass(frozen=True, eq=False)
class Point:
    """
    A single position with optional height (Z) and measure (M).

    An empty point (POINT EMPTY) has NaN for both X and Y, the way PostGIS
    stores it in WKB.
    """
    x: float
    y: float
    z: Optional[float] = None
    m: Optional[float] = None

    @classmethod
    def empty(cls, dims: Dimensions = XY) -> "Point":
        return cls(
            math.nan, math.nan,
            math.nan if dims.has_z else None,
            math.nan if dims.has_m else None,
        )

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return all(_same(a, b) for a, b in zip(self.ordinates(), other.ordinates())) \
            and self.dimensions() == other.dimensions()

    def __hash__(self):
        return hash(tuple(None if v is None or math.isnan(v) else v
                          for v in (self.x, self.y, self.z, self.m)))

    @property
    def has_z(self) -> bool:
        return self.z is not None

    @property
    def has_m(self) -> bool:
        return self.m is not None

    @property
    def is_empty(self) -> bool:
        return math.isnan(self.x) and math.isnan(self.y)

    def ordinates(self) -> tuple:
        """Present ordinates in X, Y, Z, M order."""
        values = [self.x, self.y]
        if self.z is not None:
            values.append(self.z)
        if self.m is not None:
            values.append(self.m)
        return tuple(values)

    def geometry_type(self) -> GeometryType:
        return GeometryType.POINT

    def dimensions(self) -> Dimensions:
        return Dimensions(self.z is not None, self.m is not None)

    def known_dimensions(self) -> Optional[Dimensions]:
        # An empty point still carries its Z/M slots
        return self.dimensions()

    def points(self) -> Iterator["Point"]:
        if not self.is_empty:
            yield self

    def map_points(self, fn: Callable[["Point"], "Point"]) -> "Point":
        return self if self.is_empty else fn(self)


def _as_point(value) -> Point:
    if isinstance(value, Point):
        return value
    return Point(*value)


def _uniform(dims: Iterable[Optional[Dimensions]], what: str) -> Optional[Dimensions]:
    found = {d for d in dims if d is not None}
    if len(found) > 1:
        labels = ", ".join(sorted(d.label for d in found))
        raise DimensionMismatchError(f"{what} mixes dimensions: {labels}")
    return found.pop() if found else None


class _Container:
    """
    Dimension lookup shared by every variant except Point.

    known_dimensions() is None when the geometry holds no point at all (an
    empty container, or one holding only empty lines, rings or collections);
    such members take whatever dimensions their parent has. dimensions()
    falls back to XY for the top-level value.
    """

    def known_dimensions(self) -> Optional[Dimensions]:
        raise NotImplementedError

    def dimensions(self) -> Dimensions:
        return self.known_dimensions() or XY


@dataclass(frozen=True)
class LineString(_Container):
    """Ordered sequence of points; zero or one point is the degenerate case."""
    vertices: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(_as_point(p) for p in self.vertices))

    def __len__(self):
        return len(self.vertices)

    def __iter__(self):
        return iter(self.vertices)

    def __getitem__(self, index):
        return self.vertices[index]

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    @property
    def is_closed(self) -> bool:
        return len(self.vertices) > 1 and self.vertices[0] == self.vertices[-1]

    def geometry_type(self) -> GeometryType:
        return GeometryType.LINESTRING

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform((p.dimensions() for p in self.vertices), "LineString")

    def points(self) -> Iterator[Point]:
        return iter(self.vertices)

    def map_points(self, fn: Callable[[Point], Point]) -> "LineString":
        return LineString(p.map_points(fn) for p in self.vertices)


def _as_ring(value) -> LineString:
    return value if isinstance(value, LineString) else LineString(value)


@dataclass(frozen=True)
class Polygon(_Container):
    """
    Exterior ring followed by zero or more holes.

    Ring closure is a producer contract and is not enforced here, so rings
    under construction may still be open.
    """
    rings: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "rings", tuple(_as_ring(r) for r in self.rings))

    def __len__(self):
        return len(self.rings)

    def __iter__(self):
        return iter(self.rings)

    def __getitem__(self, index):
        return self.rings[index]

    @property
    def exterior(self) -> Optional[LineString]:
        return self.rings[0] if self.rings else None

    @property
    def interiors(self) -> tuple:
        return self.rings[1:]

    @property
    def is_empty(self) -> bool:
        return not self.rings

    def geometry_type(self) -> GeometryType:
        return GeometryType.POLYGON

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform(
            (p.dimensions() for ring in self.rings for p in ring.vertices), "Polygon"
        )

    def points(self) -> Iterator[Point]:
        return chain.from_iterable(ring.vertices for ring in self.rings)

    def map_points(self, fn: Callable[[Point], Point]) -> "Polygon":
        return Polygon(ring.map_points(fn) for ring in self.rings)


@dataclass(frozen=True)
class MultiPoint(_Container):
    members: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(_as_point(p) for p in self.members))

    def __len__(self):
        return len(self.members)

    def __iter__(self):
        return iter(self.members)

    def __getitem__(self, index):
        return self.members[index]

    @property
    def is_empty(self) -> bool:
        return not self.members

    def geometry_type(self) -> GeometryType:
        return GeometryType.MULTIPOINT

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform((p.dimensions() for p in self.members), "MultiPoint")

    def points(self) -> Iterator[Point]:
        return chain.from_iterable(p.points() for p in self.members)

    def map_points(self, fn: Callable[[Point], Point]) -> "MultiPoint":
        return MultiPoint(p.map_points(fn) for p in self.members)


@dataclass(frozen=True)
class MultiLineString(_Container):
    lines: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(_as_ring(line) for line in self.lines))

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def __getitem__(self, index):
        return self.lines[index]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def geometry_type(self) -> GeometryType:
        return GeometryType.MULTILINESTRING

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform(
            (p.dimensions() for line in self.lines for p in line.vertices),
            "MultiLineString",
        )

    def points(self) -> Iterator[Point]:
        return chain.from_iterable(line.vertices for line in self.lines)

    def map_points(self, fn: Callable[[Point], Point]) -> "MultiLineString":
        return MultiLineString(line.map_points(fn) for line in self.lines)


def _as_polygon(value) -> Polygon:
    return value if isinstance(value, Polygon) else Polygon(value)


@dataclass(frozen=True)
class MultiPolygon(_Container):
    polygons: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "polygons", tuple(_as_polygon(p) for p in self.polygons))

    def __len__(self):
        return len(self.polygons)

    def __iter__(self):
        return iter(self.polygons)

    def __getitem__(self, index):
        return self.polygons[index]

    @property
    def is_empty(self) -> bool:
        return not self.polygons

    def geometry_type(self) -> GeometryType:
        return GeometryType.MULTIPOLYGON

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform(
            (p.dimensions() for poly in self.polygons for p in poly.points()),
            "MultiPolygon",
        )

    def points(self) -> Iterator[Point]:
        return chain.from_iterable(poly.points() for poly in self.polygons)

    def map_points(self, fn: Callable[[Point], Point]) -> "MultiPolygon":
        return MultiPolygon(poly.map_points(fn) for poly in self.polygons)


@dataclass(frozen=True)
class GeometryCollection(_Container):
    """
    Ordered sequence of arbitrary geometries, nested collections included.

    points() yields nothing: members are reached through `geometries` (or
    iter_points for a full recursive walk).
    """
    geometries: tuple = ()

    def __post_init__(self):
        geometries = tuple(self.geometries)
        for geom in geometries:
            if not isinstance(geom, GEOMETRY_CLASSES):
                raise TypeError(f"Not a geometry: {geom!r}")
        object.__setattr__(self, "geometries", geometries)

    def __len__(self):
        return len(self.geometries)

    def __iter__(self):
        return iter(self.geometries)

    def __getitem__(self, index):
        return self.geometries[index]

    @property
    def is_empty(self) -> bool:
        return not self.geometries

    def geometry_type(self) -> GeometryType:
        return GeometryType.GEOMETRYCOLLECTION

    def known_dimensions(self) -> Optional[Dimensions]:
        return _uniform(
            (g.known_dimensions() for g in self.geometries),
            "GeometryCollection",
        )

    def points(self) -> Iterator[Point]:
        return iter(())

    def map_points(self, fn: Callable[[Point], Point]) -> "GeometryCollection":
        return GeometryCollection(g.map_points(fn) for g in self.geometries)


Geometry = Union[
    Point, LineString, Polygon, MultiPoint,
    MultiLineString, MultiPolygon, GeometryCollection,
]

GEOMETRY_CLASSES = (
    Point, LineString, Polygon, MultiPoint,
    MultiLineString, MultiPolygon, GeometryCollection,
)

CLASS_BY_TYPE = {cls_type: cls for cls_type, cls in zip(GeometryType, GEOMETRY_CLASSES)}


def iter_points(geometry: Geometry) -> Iterator[Point]:
    """Walk every non-empty point of a geometry, recursing into collections."""
    if isinstance(geometry, GeometryCollection):
        for member in geometry.geometries:
            yield from iter_points(member)
    else:
        yield from geometry.points()


@dataclass(frozen=True)
class Envelope:
    """Bounding box over the present dimensions of a geometry."""
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    zmin: Optional[float] = None
    zmax: Optional[float] = None
    mmin: Optional[float] = None
    mmax: Optional[float] = None

    def dimensions(self) -> Dimensions:
        return Dimensions(self.zmin is not None, self.mmin is not None)

    def contains(self, point: Point) -> bool:
        return self.xmin <= point.x <= self.xmax and self.ymin <= point.y <= self.ymax


def envelope_of(geometry: Geometry) -> Optional[Envelope]:
    """
    Compute the bounding box of a geometry.

    Returns:
        Envelope, or None if the geometry has no points
    """
    pts = list(iter_points(geometry))
    if not pts:
        return None

    def span(values):
        values = list(values)
        return min(values), max(values)

    xmin, xmax = span(p.x for p in pts)
    ymin, ymax = span(p.y for p in pts)
    zmin = zmax = mmin = mmax = None
    if all(p.z is not None for p in pts):
        zmin, zmax = span(p.z for p in pts)
    if all(p.m is not None for p in pts):
        mmin, mmax = span(p.m for p in pts)
    return Envelope(xmin, ymin, xmax, ymax, zmin, zmax, mmin, mmax)
