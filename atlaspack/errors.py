"""Exceptions raised by the atlas packer and its collaborators."""


class AtlasPackError(Exception):
    """Base class for all atlaspack errors."""


class OversizeError(AtlasPackError):
    """An item's padded size exceeds the target page size."""

    def __init__(self, item_id: str, width: int, height: int, page_size: int, padding: int = 0):
        self.item_id = item_id
        self.width = width
        self.height = height
        self.page_size = page_size
        self.padding = padding
        super().__init__(
            f'Image "{item_id}" ({width}x{height}) is too large for the selected atlas size '
            f'{page_size}x{page_size} with padding {padding}.'
        )


class DuplicateItemError(AtlasPackError, ValueError):
    """Two items (or an item and a surviving existing placement) share an id."""

    def __init__(self, item_id: str, existing: bool = False):
        self.item_id = item_id
        self.existing = existing
        where = "a placement of the existing atlas" if existing else "another item"
        super().__init__(f'Item id "{item_id}" is already used by {where}.')


class PackingInvariantError(AtlasPackError):
    """The packer produced invalid geometry. This is a bug, not a user error."""

    def __init__(self, message: str, item_id=None, page_index=None, position=None, context=None):
        self.item_id = item_id
        self.page_index = page_index
        self.position = position
        self.context = dict(context or {})
        details = []
        if item_id is not None:
            details.append(f"item={item_id!r}")
        if page_index is not None:
            details.append(f"page={page_index}")
        if position is not None:
            details.append(f"at={position}")
        for key, value in self.context.items():
            details.append(f"{key}={value!r}")
        if details:
            message = f"{message} [{', '.join(details)}]"
        super().__init__(message)


class AtlasFormatError(AtlasPackError, ValueError):
    """An atlas JSON document could not be interpreted."""
