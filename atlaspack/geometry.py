from typing import List, NamedTuple


class Rectangle(NamedTuple):
    """An axis-aligned rectangle with top-left origin (x, y)."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another (touching edges do not count)."""
        return not (
            self.right <= other.x or
            self.bottom <= other.y or
            self.x >= other.right or
            self.y >= other.bottom
        )

    def contains(self, other: 'Rectangle') -> bool:
        """Check if another rectangle lies entirely inside this one."""
        return (other.x >= self.x and
                other.y >= self.y and
                other.right <= self.right and
                other.bottom <= self.bottom)

    def __str__(self):
        return f"({self.x}, {self.y}, {self.width}x{self.height})"


def split_free_rect(free_rect: Rectangle, used: Rectangle) -> List[Rectangle]:
    """Slice a free rectangle around an occupied one.

    Returns the parts of free_rect lying left of, right of, above and below
    `used`, each clipped to free_rect. Empty slices are dropped. A free
    rectangle that does not intersect `used` is returned unchanged.
    """
    if not used.intersects(free_rect):
        return [free_rect]

    slices = []
    # Left of the used rect
    if used.x > free_rect.x:
        slices.append(Rectangle(free_rect.x, free_rect.y,
                                used.x - free_rect.x, free_rect.height))
    # Right of the used rect
    if used.right < free_rect.right:
        slices.append(Rectangle(used.right, free_rect.y,
                                free_rect.right - used.right, free_rect.height))
    # Above the used rect
    if used.y > free_rect.y:
        slices.append(Rectangle(free_rect.x, free_rect.y,
                                free_rect.width, used.y - free_rect.y))
    # Below the used rect
    if used.bottom < free_rect.bottom:
        slices.append(Rectangle(free_rect.x, used.bottom,
                                free_rect.width, free_rect.bottom - used.bottom))
    return slices


def prune_contained(rects: List[Rectangle]) -> List[Rectangle]:
    """Remove rectangles that are completely contained within another in the list.

    Of two identical rectangles the earlier one is kept.
    """
    rects = list(rects)
    i = 0
    while i < len(rects):
        j = i + 1
        removed_i = False
        while j < len(rects):
            if rects[i].contains(rects[j]):
                rects.pop(j)
            elif rects[j].contains(rects[i]):
                rects.pop(i)
                removed_i = True
                break
            else:
                j += 1
        if not removed_i:
            i += 1
    return rects
