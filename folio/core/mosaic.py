"""
Grid spans for mosaic layouts.

Boards and the events feed render tiles on a CSS grid with small row units;
a tile's size token (L/M/S) becomes a column and row span that never exceeds
the available columns.
"""
SIZE_TOKENS = ('L', 'M', 'S')

SIZE_TO_TOKEN = {
    'large': 'L',
    'medium': 'M',
    'small': 'S',
}

TOKEN_TO_SIZE = {token: size for size, token in SIZE_TO_TOKEN.items()}


def size_to_token(size):
    """large/medium/small (or an existing token) -> L/M/S; unknown -> S"""
    if not size:
        return 'S'
    value = str(size).strip()
    if value.upper() in SIZE_TOKENS:
        return value.upper()
    return SIZE_TO_TOKEN.get(value.lower(), 'S')


def estimate_cols(width_px):
    """Column count for a viewport width, matching the client breakpoints"""
    try:
        width = float(width_px)
    except (TypeError, ValueError):
        return 1
    if width >= 1280:
        return 6
    if width >= 1024:
        return 4
    if width >= 640:
        return 2
    return 1


def span_for(size, cols=6):
    """Return {'col_span', 'row_span'} for a size token on a grid of `cols` columns"""
    try:
        cols = max(1, int(cols))
    except (TypeError, ValueError):
        cols = 6

    token = size_to_token(size)
    if token == 'L':
        if cols >= 6:
            col, row = 4, 34
        elif cols >= 4:
            col, row = 3, 32
        else:
            col, row = 2, 30
        return {'col_span': min(col, cols), 'row_span': row}
    if token == 'M':
        return {'col_span': min(2, cols), 'row_span': 26 if cols >= 4 else 24}
    return {'col_span': 1, 'row_span': 18}
