"""
Free-rectangle (maximal rectangles) packing of sprites onto square atlas pages.

Every page keeps a list of free rectangles. An item goes into the top-most,
then left-most free rectangle that can hold it plus padding, with best short
side / long side fit breaking ties. Placing an item slices every free
rectangle it touches and drops free rectangles that end up inside another.
When no open page can take an item a new page is started.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import DuplicateItemError, OversizeError, PackingInvariantError
from .geometry import Rectangle, prune_contained, split_free_rect
from .models import ExistingPage, Page, PackItem, Placement

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1024
DEFAULT_PADDING = 2
DEFAULT_MAX_PAGE_SIZE = 4096


class PageBuilder:
    """Mutable state of one page while packing. Call finalize() to get a Page."""

    def __init__(self, index: int, size: int, padding: int):
        self.index = index
        self.size = size
        self.padding = padding
        # Start with the entire page as a free rectangle
        self.free_rects: List[Rectangle] = [Rectangle(0, 0, size, size)]
        self.placements: List[Placement] = []
        self.notes: List[str] = []
        self.is_editing = False

    def find_position(self, width: int, height: int) -> Optional[Rectangle]:
        """Return the free rectangle an item of this size should go into, or None."""
        required_width = width + self.padding
        required_height = height + self.padding

        best_rect = None
        best_score = None
        for rect in self.free_rects:
            if rect.width < required_width or rect.height < required_height:
                continue
            leftover_width = rect.width - required_width
            leftover_height = rect.height - required_height
            score = (rect.y, rect.x,
                     min(leftover_width, leftover_height),
                     max(leftover_width, leftover_height))
            if best_score is None or score < best_score:
                best_score = score
                best_rect = rect
        return best_rect

    def collision(self, footprint: Rectangle) -> Optional[Placement]:
        """Return a committed placement whose padded footprint intersects `footprint`."""
        for placement in self.placements:
            if placement.footprint(self.padding).intersects(footprint):
                return placement
        return None

    def insert(self, item: PackItem) -> Optional[Placement]:
        """Try to place an item. Returns the placement or None if it doesn't fit."""
        free_rect = self.find_position(item.width, item.height)
        if free_rect is None:
            return None

        placement = Placement(item.id, free_rect.x, free_rect.y, item.width, item.height,
                              payload=item.payload, trim=item.trim)
        footprint = placement.footprint(self.padding)

        blocker = self.collision(footprint)
        if blocker is not None:
            logger.warning("Free space on page %d claimed %s was free for %r but %r is there; "
                           "trying another page", self.index, footprint, item.id, blocker.id)
            return None

        self._commit(placement)
        logger.debug("Placed %r at (%d, %d) on page %d", item.id, placement.x, placement.y, self.index)
        return placement

    def seed(self, placement: Placement) -> Placement:
        """Add a placement carried over from an existing atlas without searching for space."""
        placement = replace(placement, inherited=True)
        self._commit(placement)
        return placement

    def _commit(self, placement: Placement):
        self.placements.append(placement)
        footprint = placement.footprint(self.padding)
        new_free_rects = []
        for free_rect in self.free_rects:
            new_free_rects.extend(split_free_rect(free_rect, footprint))
        self.free_rects = prune_contained(new_free_rects)

    def overlapping_pairs(self) -> List[Tuple[Placement, Placement]]:
        """All pairs of placements whose padded footprints intersect."""
        pairs = []
        footprints = [p.footprint(self.padding) for p in self.placements]
        for i in range(len(self.placements)):
            for j in range(i + 1, len(self.placements)):
                if footprints[i].intersects(footprints[j]):
                    pairs.append((self.placements[i], self.placements[j]))
        return pairs

    def out_of_bounds(self) -> List[Placement]:
        """Newly placed items whose padded footprint leaves the page."""
        page = Rectangle(0, 0, self.size, self.size)
        return [p for p in self.placements
                if not p.inherited and not page.contains(p.footprint(self.padding))]

    def finalize(self) -> Page:
        return Page(
            index=self.index,
            size=self.size,
            padding=self.padding,
            placements=tuple(self.placements),
            free_rects=tuple(self.free_rects),
            note="; ".join(self.notes) if self.notes else None,
            is_editing=self.is_editing,
        )


def by_max_side(items: Sequence[PackItem]) -> List[PackItem]:
    """Largest dimension first; equal items keep their input order."""
    return sorted(items, key=lambda item: max(item.width, item.height), reverse=True)


def by_area(items: Sequence[PackItem]) -> List[PackItem]:
    """Largest area first; equal items keep their input order."""
    return sorted(items, key=lambda item: item.width * item.height, reverse=True)


def _validate(items: Sequence[PackItem], page_size: int, padding: int, max_page_size: int,
              existing_page: Optional[ExistingPage]) -> Tuple[int, int]:
    if existing_page is not None:
        page_size = existing_page.size
        padding = existing_page.padding
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    if padding < 0:
        raise ValueError(f"Padding must not be negative, got {padding}")
    if page_size > max_page_size:
        raise ValueError(f"Page size {page_size} exceeds the maximum page size {max_page_size}")

    for item in items:
        if item.width + padding > page_size or item.height + padding > page_size:
            raise OversizeError(item.id, item.width, item.height, page_size, padding)

    taken = set()
    if existing_page is not None:
        taken.update(p.id for p in existing_page.surviving_placements())
    seen = set()
    for item in items:
        if item.id in seen:
            raise DuplicateItemError(item.id)
        if item.id in taken:
            raise DuplicateItemError(item.id, existing=True)
        seen.add(item.id)
    return page_size, padding


def _place_all(ordered: Iterable[PackItem], page_size: int, padding: int,
               existing_page: Optional[ExistingPage]) -> List[PageBuilder]:
    pages = []
    if existing_page is not None:
        first = PageBuilder(0, page_size, padding)
        first.is_editing = True
        for placement in existing_page.surviving_placements():
            first.seed(placement)
        pages.append(first)

    for item in ordered:
        placed = None
        for page in pages:
            placed = page.insert(item)
            if placed is not None:
                break
        if placed is not None:
            continue

        page = PageBuilder(len(pages), page_size, padding)
        pages.append(page)
        logger.info("Opened page %d (%dx%d) for %r", page.index, page_size, page_size, item.id)
        if page.insert(item) is None:
            raise PackingInvariantError("Item does not fit on an empty page",
                                        item_id=item.id, page_index=page.index,
                                        context={"page_size": page_size, "padding": padding})
    return pages


def _defects(pages: List[PageBuilder]):
    """Overlaps and bound violations that involve at least one newly placed item."""
    found = []
    for page in pages:
        for a, b in page.overlapping_pairs():
            if not (a.inherited and b.inherited):
                found.append((page, a, b))
        for placement in page.out_of_bounds():
            found.append((page, placement, None))
    return found


def _note_inherited_overlaps(page: PageBuilder):
    for a, b in page.overlapping_pairs():
        if a.inherited and b.inherited:
            page.notes.append(f'Existing sprites "{a.id}" {a.rect} and "{b.id}" {b.rect} '
                              f'occupy overlapping regions; kept as they are')
    if page.notes:
        logger.warning("Page %d: %s", page.index, "; ".join(page.notes))


def pack(items: Iterable[PackItem], page_size: int = DEFAULT_PAGE_SIZE, padding: int = DEFAULT_PADDING,
         max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
         existing_page: Optional[ExistingPage] = None) -> List[Page]:
    """
    Pack items onto square pages.

    When `existing_page` is given its size and padding are used for every page,
    its surviving placements are pre-loaded onto page 0, and new items fill the
    space around them before spilling onto new pages.

    Raises OversizeError if an item can never fit a page, DuplicateItemError for
    reused ids and PackingInvariantError if the packer produced invalid geometry.
    Either every item is placed or nothing is returned.
    """
    items = list(items)
    page_size, padding = _validate(items, page_size, padding, max_page_size, existing_page)
    logger.info("Packing %d item(s) onto %dx%d pages with padding %d%s", len(items), page_size,
                page_size, padding, " (extending existing atlas)" if existing_page else "")

    defects = []
    ordered = []
    for sort_order in (by_max_side, by_area):
        ordered = sort_order(items)
        pages = _place_all(ordered, page_size, padding, existing_page)
        defects = _defects(pages)
        if not defects:
            break
        logger.info("Packing by %s produced %d invalid placement(s), retrying once",
                    sort_order.__name__, len(defects))
    else:
        page, a, b = defects[0]
        message = (f"Placements {a.id!r} and {b.id!r} overlap" if b is not None
                   else f"Placement {a.id!r} extends past the page edge")
        context = {"page_size": page_size, "padding": padding,
                   "order": [item.id for item in ordered]}
        logger.error("%s on page %d (%s)", message, page.index, context)
        raise PackingInvariantError(message, item_id=a.id, page_index=page.index,
                                    position=(a.x, a.y), context=context)

    for page in pages:
        _note_inherited_overlaps(page)
    return [page.finalize() for page in pages]
