"""Pack sprite images into square texture atlas pages."""

from .errors import (AtlasFormatError, AtlasPackError, DuplicateItemError, OversizeError,
                     PackingInvariantError)
from .geometry import Rectangle
from .metadata import build_atlas_json, build_manifest, existing_page_from_json, load_existing_page
from .models import ExistingPage, PackItem, Page, Placement, TrimData
from .packer import PageBuilder, pack
from .render import render_page, render_pages

__version__ = "1.0.0"
