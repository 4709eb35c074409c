"""
Spatial reference identifiers attached to geometries.

Two forms are supported:

- WithSrid: the SRID is a runtime field, which is what EWKB carries per value.
- Tagged[TagT, GeometryT]: the SRID is a class-level tag. Static type checkers
  (mypy, pyright) treat Tagged[Wgs84, Point] and Tagged[WebMercator, Point] as
  distinct types, so mixing them is flagged before the code runs. Python does
  not enforce generic parameters at runtime, so require() provides the
  equivalent runtime check at boundaries that need it.

Neither form reprojects anything; retagging is a plain data copy.
"""

from dataclasses import dataclass
from typing import ClassVar, Generic, Optional, Type, TypeVar

from ..errors import SridMismatchError
from .types import GEOMETRY_CLASSES, Geometry

G = TypeVar("G")
TagT = TypeVar("TagT", bound="SridTag")
NewTagT = TypeVar("NewTagT", bound="SridTag")


class SridTag:
    """Base class for static SRID tags. Subclasses set `srid`."""
    srid: ClassVar[int] = 0


class Unspecified(SridTag):
    srid = 0


class Wgs84(SridTag):
    """EPSG:4326, geographic WGS 84."""
    srid = 4326


class WebMercator(SridTag):
    """EPSG:3857, spherical web mercator."""
    srid = 3857


_TAGS: dict[int, Type[SridTag]] = {0: Unspecified, 4326: Wgs84, 3857: WebMercator}


def srid_tag(srid: int) -> Type[SridTag]:
    """
    Return the tag class for an SRID, minting a new one on first use.

    The same class is returned for the same SRID, so tags compare by identity.
    """
    tag = _TAGS.get(srid)
    if tag is None:
        tag = type(f"Epsg{srid}", (SridTag,), {"srid": srid})
        _TAGS[srid] = tag
    return tag


@dataclass(frozen=True)
class WithSrid(Generic[G]):
    """A geometry paired with a runtime SRID."""
    geometry: G
    srid: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.geometry, GEOMETRY_CLASSES):
            raise TypeError(f"Not a geometry: {self.geometry!r}")

    def tagged(self) -> "Tagged":
        return Tagged(srid_tag(self.srid or 0), self.geometry)


@dataclass(frozen=True)
class Tagged(Generic[TagT, G]):
    """A geometry carrying a static SRID tag."""
    tag: Type[TagT]
    geometry: G

    def __post_init__(self):
        if not (isinstance(self.tag, type) and issubclass(self.tag, SridTag)):
            raise TypeError(f"Not an SRID tag: {self.tag!r}")
        if not isinstance(self.geometry, GEOMETRY_CLASSES):
            raise TypeError(f"Not a geometry: {self.geometry!r}")

    @property
    def srid(self) -> int:
        return self.tag.srid

    def retag(self, tag: Type[NewTagT]) -> "Tagged[NewTagT, G]":
        """Explicitly relabel the geometry with another SRID (no reprojection)."""
        return Tagged(tag, self.geometry)

    def require(self, tag: Type[SridTag]) -> "Tagged[TagT, G]":
        """Return self if it carries `tag`'s SRID, else raise SridMismatchError."""
        if tag.srid != self.tag.srid:
            raise SridMismatchError(
                f"Expected SRID {tag.srid} ({tag.__name__}), got {self.tag.srid} "
                f"({self.tag.__name__})"
            )
        return self

    def as_runtime(self) -> WithSrid:
        return WithSrid(self.geometry, self.srid or None)


def with_srid(value, srid: Optional[int]) -> WithSrid:
    """Attach (or replace) a runtime SRID."""
    geometry, _ = unwrap(value)
    return WithSrid(geometry, srid)


def get_srid(value) -> Optional[int]:
    """SRID of a wrapped geometry, None for bare geometries or SRID 0."""
    _, srid = unwrap(value)
    return srid


def unwrap(value) -> tuple[Geometry, Optional[int]]:
    """Split any accepted value into (geometry, srid-or-None)."""
    if isinstance(value, (WithSrid, Tagged)):
        return value.geometry, (value.srid or None)
    if isinstance(value, GEOMETRY_CLASSES):
        return value, None
    raise TypeError(f"Not a geometry: {value!r}")
