from atlaspack.geometry import Rectangle, prune_contained, split_free_rect


def test_touching_rectangles_do_not_intersect():
    a = Rectangle(0, 0, 10, 10)
    assert not a.intersects(Rectangle(10, 0, 5, 5))
    assert not a.intersects(Rectangle(0, 10, 5, 5))
    assert a.intersects(Rectangle(9, 9, 5, 5))


def test_contains_includes_equal_rectangles():
    a = Rectangle(0, 0, 10, 10)
    assert a.contains(Rectangle(0, 0, 10, 10))
    assert a.contains(Rectangle(2, 2, 3, 3))
    assert not a.contains(Rectangle(8, 8, 3, 3))


def test_split_keeps_non_intersecting_rect():
    free = Rectangle(50, 50, 10, 10)
    assert split_free_rect(free, Rectangle(0, 0, 10, 10)) == [free]


def test_split_around_center_gives_four_slices():
    free = Rectangle(0, 0, 100, 100)
    used = Rectangle(40, 40, 20, 20)
    assert split_free_rect(free, used) == [
        Rectangle(0, 0, 40, 100),
        Rectangle(60, 0, 40, 100),
        Rectangle(0, 0, 100, 40),
        Rectangle(0, 60, 100, 40),
    ]


def test_split_at_corner_drops_empty_slices():
    free = Rectangle(0, 0, 100, 100)
    used = Rectangle(0, 0, 30, 20)
    assert split_free_rect(free, used) == [
        Rectangle(30, 0, 70, 100),
        Rectangle(0, 20, 100, 80),
    ]


def test_split_fully_covered_rect_disappears():
    assert split_free_rect(Rectangle(5, 5, 5, 5), Rectangle(0, 0, 20, 20)) == []


def test_prune_removes_contained_and_keeps_first_duplicate():
    rects = [
        Rectangle(0, 0, 10, 10),
        Rectangle(0, 0, 50, 50),
        Rectangle(60, 0, 10, 10),
        Rectangle(60, 0, 10, 10),
    ]
    assert prune_contained(rects) == [Rectangle(0, 0, 50, 50), Rectangle(60, 0, 10, 10)]


def test_prune_does_not_modify_input():
    rects = [Rectangle(0, 0, 10, 10), Rectangle(0, 0, 20, 20)]
    prune_contained(rects)
    assert len(rects) == 2
