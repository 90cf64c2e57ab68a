"""
JSON frame metadata for atlas pages, in the common "hash" sprite sheet format:

    {"frames": {name: {"frame": {x, y, w, h}, "rotated", "trimmed",
                       "spriteSourceSize", "sourceSize"}},
     "meta": {"size": {w, h}, "padding", ...}}

Also reads such a document back into an ExistingPage for edit mode.
"""

import json
import logging
import os
from typing import List, Optional, Sequence

from PIL import Image

from .errors import AtlasFormatError
from .models import ExistingPage, Page, Placement

logger = logging.getLogger(__name__)

APP_NAME = "atlaspack"
APP_VERSION = "1.0"


def frame_entry(placement: Placement) -> dict:
    entry = {
        "frame": {"x": placement.x, "y": placement.y, "w": placement.width, "h": placement.height},
        "rotated": False,
    }
    if placement.trim is not None:
        entry.update(placement.trim.as_frame_fields(placement.width, placement.height))
    else:
        entry.update({
            "trimmed": False,
            "spriteSourceSize": {"x": 0, "y": 0, "w": placement.width, "h": placement.height},
            "sourceSize": {"w": placement.width, "h": placement.height},
        })
    return entry


def build_atlas_json(page: Page, existing_page: Optional[ExistingPage] = None,
                     image_name: Optional[str] = None) -> dict:
    """Build the metadata document for one page.

    For the page that extends `existing_page`, frames and meta of the original
    document are kept (minus deleted sprites) and only new placements are
    written over them.
    """
    original = existing_page.original_json if existing_page is not None else None
    if page.is_editing and original:
        removed = set(existing_page.removed_ids())
        frames = {name: data for name, data in original.get("frames", {}).items()
                  if name not in removed}
        for placement in page.placements:
            if not placement.inherited or placement.id not in frames:
                frames[placement.id] = frame_entry(placement)
        meta = dict(original.get("meta", {}))
        meta["size"] = {"w": page.size, "h": page.size}
        meta["padding"] = page.padding
        if image_name:
            meta["image"] = image_name
        return {"frames": frames, "meta": meta}

    frames = {placement.id: frame_entry(placement) for placement in page.placements}
    meta = {
        "app": APP_NAME,
        "version": APP_VERSION,
        "size": {"w": page.size, "h": page.size},
        "padding": page.padding,
        "format": "RGBA8888",
    }
    if image_name:
        meta["image"] = image_name
    return {"frames": frames, "meta": meta}


def build_manifest(pages: Sequence[Page], names: Sequence[str], documents: Sequence[dict]) -> dict:
    """Summary of every page written by one export."""
    return {
        "atlases": [
            {
                "name": name,
                "size": page.size,
                "padding": page.padding,
                "spriteCount": len(document.get("frames", {})),
            }
            for page, name, document in zip(pages, names, documents)
        ]
    }


def existing_page_from_json(document: dict, image=None) -> ExistingPage:
    """Turn a parsed atlas document into an ExistingPage of ghost placements."""
    frames = document.get("frames")
    if not isinstance(frames, dict):
        raise AtlasFormatError('Invalid atlas JSON format: missing "frames" object')

    placements: List[Placement] = []
    for name, data in frames.items():
        frame = data.get("frame") if isinstance(data, dict) else None
        if not frame:
            logger.debug("Skipping frame %r without a frame rectangle", name)
            continue
        try:
            placements.append(Placement(name, int(frame["x"]), int(frame["y"]),
                                        int(frame["w"]), int(frame["h"])))
        except (KeyError, TypeError, ValueError) as e:
            raise AtlasFormatError(f"Invalid frame {name!r}: {e}") from e

    meta = document.get("meta") or {}
    if not isinstance(meta, dict):
        raise AtlasFormatError('Invalid atlas JSON format: "meta" is not an object')
    size = meta.get("size") or {}
    if not isinstance(size, dict):
        raise AtlasFormatError(f"Invalid meta.size {size!r}: expected an object with w and h")
    size = size.get("w")
    if size is None and image is not None:
        size = image.width
    if size is None:
        raise AtlasFormatError("Atlas size is missing from meta.size.w and no image was given")
    try:
        size = int(size)
        padding = int(meta.get("padding") or 0)
    except (TypeError, ValueError) as e:
        raise AtlasFormatError(f"Invalid atlas size or padding in meta: {e}") from e

    return ExistingPage(
        size=size,
        padding=padding,
        placements=tuple(placements),
        image=image,
        original_json=document,
    )


def load_existing_page(json_path: str, image_path: Optional[str] = None) -> ExistingPage:
    """Load an exported atlas (JSON plus optional PNG) for extending."""
    with open(json_path, 'r') as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise AtlasFormatError(f"{os.path.basename(json_path)} is not valid JSON: {e}") from e

    image = None
    if image_path:
        with Image.open(image_path) as img:
            image = img.convert('RGBA')
    page = existing_page_from_json(document, image)
    logger.info("Loaded %s: %d frames, size %d, padding %d", json_path,
                len(page.placements), page.size, page.padding)
    return page
