import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from PIL import Image

from .errors import AtlasPackError, OversizeError
from .metadata import build_atlas_json, build_manifest, load_existing_page
from .models import PackItem
from .packer import DEFAULT_MAX_PAGE_SIZE, DEFAULT_PADDING, DEFAULT_PAGE_SIZE, pack
from .render import render_pages

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif')


def load_items(input_dir: str) -> List[PackItem]:
    """Load every image in a directory as a pack item named after its file."""
    items = []
    for file in sorted(os.listdir(input_dir)):
        full_path = os.path.join(input_dir, file)
        if not (os.path.isfile(full_path) and file.lower().endswith(IMAGE_EXTENSIONS)):
            continue
        with Image.open(full_path) as img:
            img = img.convert('RGBA')
        items.append(PackItem(file, img.width, img.height, payload=img))
    return items


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='atlaspack',
                                     description='Pack sprite images into square atlas pages')
    parser.add_argument('input_dir', help='Directory containing sprite images')
    parser.add_argument('output_dir', help='Directory to save atlas pages and metadata')
    parser.add_argument('--size', type=int, default=DEFAULT_PAGE_SIZE, help='Side length of each atlas page')
    parser.add_argument('--padding', type=int, default=DEFAULT_PADDING, help='Padding after each sprite')
    parser.add_argument('--max-size', type=int, default=DEFAULT_MAX_PAGE_SIZE, help='Largest allowed page size')
    parser.add_argument('--prefix', default='atlas', help='Prefix for output files')
    parser.add_argument('--extend', metavar='JSON', help='Existing atlas JSON to add the sprites to')
    parser.add_argument('--extend-image', metavar='PNG', help='Sheet image belonging to --extend')
    parser.add_argument('--remove', metavar='NAME', nargs='+', default=[],
                        help='Sprites to delete from the existing atlas')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Show packer log output')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    if args.remove and not args.extend:
        print("--remove needs --extend", file=sys.stderr)
        return 2
    if args.extend and not args.extend_image:
        print("--extend needs --extend-image with the atlas sheet", file=sys.stderr)
        return 2

    print(f"Scanning directory: {args.input_dir}")
    try:
        items = load_items(args.input_dir)
        existing = None
        if args.extend:
            existing = load_existing_page(args.extend, args.extend_image)
            if args.remove:
                existing = existing.without(args.remove)
            # Sprites with the same name as an existing frame replace it
            surviving = {p.id for p in existing.surviving_placements()}
            replaced = [item.id for item in items if item.id in surviving]
            if replaced:
                print(f"Replacing {len(replaced)} existing sprite(s)")
                existing = existing.without(replaced)
    except (OSError, KeyError, AtlasPackError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not items and existing is None:
        print(f"No sprite files found in {args.input_dir}")
        return 1

    print(f"Packing {len(items)} sprites")
    try:
        pages = pack(items, args.size, args.padding, args.max_size, existing)
    except OversizeError as e:
        print(f"Error: {e} Resize the sprite or choose a larger page size.", file=sys.stderr)
        return 1
    except (AtlasPackError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    os.makedirs(args.output_dir, exist_ok=True)
    sheets = render_pages(pages, existing)
    names, documents = [], []
    for page, sheet in zip(pages, sheets):
        name = f"{args.prefix}_{page.index + 1}"
        sheet_path = os.path.join(args.output_dir, f"{name}.png")
        atlas_path = os.path.join(args.output_dir, f"{name}.json")
        document = build_atlas_json(page, existing, os.path.basename(sheet_path))

        print(f"Saving sheet {page.index + 1}/{len(pages)}: {sheet_path} "
              f"({page.size}×{page.size}) with {len(page.placements)} sprites")
        if page.note:
            print(f"Note: {page.note}")
        sheet.save(sheet_path)
        with open(atlas_path, 'w') as f:
            json.dump(document, f, indent=2)
        names.append(name)
        documents.append(document)

    with open(os.path.join(args.output_dir, 'pack_manifest.json'), 'w') as f:
        json.dump(build_manifest(pages, names, documents), f, indent=2)

    total_pixels = sum(page.size * page.size for page in pages)
    sprite_pixels = sum(p.width * p.height for page in pages for p in page.placements)
    efficiency = (sprite_pixels / total_pixels) * 100 if total_pixels > 0 else 0
    print(f"\nFinal packing efficiency: {efficiency:.2f}%")
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
