from typing import Iterable, Optional

from PIL import Image

from .geometry import Rectangle
from .models import ExistingPage, Page


def render_page(page: Page, base_image: Optional[Image.Image] = None,
                removed_regions: Iterable[Rectangle] = ()) -> Image.Image:
    """Draw a page's sprites onto a transparent RGBA sheet.

    When extending an atlas the old sheet is drawn first and removed regions
    are cleared. Placements without an image (carried over from the old
    atlas) keep their pixels from the base image, even where a cleared
    region overlapped them.
    """
    sheet = Image.new('RGBA', (page.size, page.size), (0, 0, 0, 0))

    base = None
    if base_image is not None:
        base = base_image.convert('RGBA')
        if base.size != sheet.size:
            base = base.resize(sheet.size)
        sheet.paste(base, (0, 0))

    for region in removed_regions:
        sheet.paste((0, 0, 0, 0), (region.x, region.y, region.right, region.bottom))

    if base is not None:
        for placement in page.placements:
            if placement.inherited:
                box = (placement.x, placement.y, placement.rect.right, placement.rect.bottom)
                sheet.paste(base.crop(box), (placement.x, placement.y))

    for placement in page.placements:
        if not isinstance(placement.payload, Image.Image):
            continue
        img = placement.payload
        if img.size != (placement.width, placement.height):
            img = img.resize((placement.width, placement.height))
        sheet.paste(img, (placement.x, placement.y))
    return sheet


def render_pages(pages: Iterable[Page], existing_page: Optional[ExistingPage] = None):
    """Render every page; the page extending `existing_page` gets its image as base."""
    sheets = []
    for page in pages:
        if page.is_editing and existing_page is not None:
            sheets.append(render_page(page, existing_page.image, existing_page.cleared_regions()))
        else:
            sheets.append(render_page(page))
    return sheets
