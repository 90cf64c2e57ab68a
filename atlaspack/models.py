"""
Value types passed into and returned from the packer.

PackItem and ExistingPage are caller-owned inputs; Placement and Page are
produced fresh by every pack() call and are never mutated afterwards.
"""

from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Iterable, Optional, Tuple

from .geometry import Rectangle


@dataclass(frozen=True)
class TrimData:
    """Pre-computed trim info for a sprite, carried through to the frame metadata."""
    trimmed: bool
    source_w: int
    source_h: int
    offset_x: int = 0
    offset_y: int = 0

    def as_frame_fields(self, width: int, height: int) -> dict:
        return {
            "trimmed": self.trimmed,
            "spriteSourceSize": {"x": self.offset_x, "y": self.offset_y, "w": width, "h": height},
            "sourceSize": {"w": self.source_w, "h": self.source_h},
        }


@dataclass(frozen=True)
class PackItem:
    """One sprite to be packed. `payload` is passed through untouched (usually a PIL image)."""
    id: str
    width: int
    height: int
    payload: Any = None
    trim: Optional[TrimData] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f'Item "{self.id}" must have a positive size, got {self.width}x{self.height}')


@dataclass(frozen=True)
class Placement:
    """An item assigned to a position on a page. (x, y) is the unpadded content origin."""
    id: str
    x: int
    y: int
    width: int
    height: int
    payload: Any = None
    trim: Optional[TrimData] = None
    inherited: bool = False

    @property
    def rect(self) -> Rectangle:
        return Rectangle(self.x, self.y, self.width, self.height)

    def footprint(self, padding: int) -> Rectangle:
        """The area reserved for collision purposes: the sprite plus trailing padding."""
        return Rectangle(self.x, self.y, self.width + padding, self.height + padding)


@dataclass(frozen=True)
class Page:
    index: int
    size: int
    padding: int
    placements: Tuple[Placement, ...] = ()
    free_rects: Tuple[Rectangle, ...] = ()
    note: Optional[str] = None
    # True when page 0 was seeded from an ExistingPage
    is_editing: bool = False

    def find(self, item_id: str) -> Optional[Placement]:
        for placement in self.placements:
            if placement.id == item_id:
                return placement
        return None


@dataclass(frozen=True)
class ExistingPage:
    """A previously exported atlas page to be extended.

    `placements` usually have no payload. A placement is deleted when its id is
    in `removed_names` or its rectangle lies wholly inside one of
    `removed_regions`. `image` and `original_json` are only used by the
    rasterizer and metadata builder.
    """
    size: int
    padding: int = 0
    placements: Tuple[Placement, ...] = ()
    removed_regions: Tuple[Rectangle, ...] = ()
    removed_names: FrozenSet[str] = frozenset()
    image: Any = field(default=None, compare=False)
    original_json: Optional[dict] = field(default=None, compare=False)

    def is_removed(self, placement: Placement) -> bool:
        if placement.id in self.removed_names:
            return True
        return any(region.contains(placement.rect) for region in self.removed_regions)

    def surviving_placements(self) -> Tuple[Placement, ...]:
        return tuple(p for p in self.placements if not self.is_removed(p))

    def removed_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.placements if self.is_removed(p))

    def cleared_regions(self) -> Tuple[Rectangle, ...]:
        """Everything the rasterizer has to wipe off the old sheet."""
        named = tuple(p.rect for p in self.placements if p.id in self.removed_names)
        return self.removed_regions + named

    def without(self, ids: Iterable[str]) -> 'ExistingPage':
        """Return a copy with only the named placements deleted.

        Used to delete a sprite, or to replace one by removing it and packing
        the new version as a regular item. Sprites sharing or nested inside
        the deleted sprite's area are kept.
        """
        ids = set(ids)
        known = {p.id for p in self.placements}
        missing = ids - known
        if missing:
            raise KeyError(f"Unknown sprite(s) in existing atlas: {', '.join(sorted(missing))}")
        return replace(self, removed_names=self.removed_names | frozenset(ids))
