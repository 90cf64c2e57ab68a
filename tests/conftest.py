import pytest

from atlaspack.models import PackItem


def _check_pages(pages, inherited_overlap_ok=True):
    """Assert the placement invariants that must hold for every pack() result."""
    for page in pages:
        footprints = [p.footprint(page.padding) for p in page.placements]
        for p, fp in zip(page.placements, footprints):
            if not p.inherited:
                assert fp.x >= 0 and fp.y >= 0, p
                assert fp.right <= page.size and fp.bottom <= page.size, p
        for i in range(len(page.placements)):
            for j in range(i + 1, len(page.placements)):
                a, b = page.placements[i], page.placements[j]
                if inherited_overlap_ok and a.inherited and b.inherited:
                    continue
                assert not footprints[i].intersects(footprints[j]), (a.id, b.id)


@pytest.fixture
def make_items():
    def make(*specs):
        return [PackItem(name, w, h) for name, w, h in specs]
    return make


@pytest.fixture
def check_pages():
    return _check_pages
