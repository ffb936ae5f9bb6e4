"""
Board tile sizing.

A selection's tile is large, medium or small. The size comes from, in order:
an explicit display-size override, the featured flag, physical dimensions,
and finally keywords in the product name and tags.
"""
LARGE = 'large'
MEDIUM = 'medium'
SMALL = 'small'

TILE_SIZES = (LARGE, MEDIUM, SMALL)

# Accepted override values; 'auto' clears the override
OVERRIDE_ALIASES = {
    'l': LARGE,
    'm': MEDIUM,
    's': SMALL,
    'large': LARGE,
    'medium': MEDIUM,
    'small': SMALL,
}

LARGE_AREA_SQIN = 4000
LARGE_SPAN_IN = 84
MEDIUM_AREA_SQIN = 1200
MEDIUM_SPAN_IN = 48

LARGE_KEYWORDS = ('sofa', 'sectional', 'bed', 'dining table', 'desk', 'console', 'island', 'countertop')
MEDIUM_KEYWORDS = ('chair', 'ottoman', 'nightstand', 'dresser', 'vanity', 'side table', 'coffee table', 'end table')


def _number(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN compares unequal to itself
    return number if number == number else 0.0


def normalize_size(value):
    """Map L/M/S/large/medium/small (any case) to a tile size; None for auto or unknown"""
    if value is None:
        return None
    return OVERRIDE_ALIASES.get(str(value).strip().lower())


def size_from_dimensions(dims):
    """Tile size from {'widthIn', 'depthIn', 'heightIn'}, or None without dimensions"""
    if dims is None or not isinstance(dims, dict):
        return None
    width = _number(dims.get('widthIn'))
    depth = _number(dims.get('depthIn'))
    height = _number(dims.get('heightIn'))
    area = width * depth  # footprint
    span = max(width, depth, height)

    if area >= LARGE_AREA_SQIN or span >= LARGE_SPAN_IN:
        return LARGE
    if area >= MEDIUM_AREA_SQIN or span >= MEDIUM_SPAN_IN:
        return MEDIUM
    return SMALL


def size_from_keywords(product_name, tags):
    name = (product_name or '').lower()
    tag_text = ' '.join(str(tag) for tag in (tags or [])).lower()
    combined = f'{name} {tag_text}'

    if any(keyword in combined for keyword in LARGE_KEYWORDS):
        return LARGE
    if any(keyword in combined for keyword in MEDIUM_KEYWORDS):
        return MEDIUM
    return SMALL


def compute_tile_size(selection):
    """
    Tile size for a selection.

    `selection` is a Selection instance or a dict with product_name, tags and
    ui_meta keys. ui_meta may hold displaySize, featured and dimensions.
    """
    if isinstance(selection, dict):
        ui_meta = selection.get('ui_meta') or {}
        product_name = selection.get('product_name')
        tags = selection.get('tags')
    else:
        ui_meta = getattr(selection, 'ui_meta', None) or {}
        product_name = getattr(selection, 'product_name', None)
        tags = getattr(selection, 'tags', None)

    override = normalize_size(ui_meta.get('displaySize'))
    if override:
        return override

    if ui_meta.get('featured'):
        return LARGE

    by_dimensions = size_from_dimensions(ui_meta.get('dimensions'))
    if by_dimensions:
        return by_dimensions

    return size_from_keywords(product_name, tags)
