"""
Events feed mosaic: rank events and hand out L/M/S tiles so large tiles
are rare and small ones are spread through the feed.
"""
from folio.core.mosaic import span_for

LARGE_SHARE = 0.08
MEDIUM_SHARE = 0.40
MIN_LARGE = 2
MIN_MEDIUM = 6

# Tile order repeated until every bucket is empty
INTERLEAVE_PATTERN = ['L', 'M', 'S', 'M', 'S', 'M']


def _value(event, field, default=None):
    if isinstance(event, dict):
        return event.get(field, default)
    return getattr(event, field, default)


def feed_score(event):
    rsvps = _value(event, 'rsvp_count') or 0
    views = _value(event, 'view_count') or 0
    party = any('PARTY' in str(event_type).upper() for event_type in (_value(event, 'event_types') or []))
    sponsored = bool(_value(event, 'is_sponsored'))
    return rsvps * 3 + views * 0.5 + (50 if party else 0) + (80 if sponsored else 0)


def assign_sizes(events):
    """List of (event, size) pairs in feed order"""
    ranked = sorted(events, key=feed_score, reverse=True)
    n = len(ranked)
    large_count = max(MIN_LARGE, int(n * LARGE_SHARE))
    medium_count = max(MIN_MEDIUM, int(n * MEDIUM_SHARE))

    buckets = {
        'L': ranked[:large_count],
        'M': ranked[large_count:large_count + medium_count],
        'S': ranked[large_count + medium_count:],
    }
    positions = {'L': 0, 'M': 0, 'S': 0}

    out = []
    while len(out) < n:
        for size in INTERLEAVE_PATTERN:
            if positions[size] < len(buckets[size]):
                out.append((buckets[size][positions[size]], size))
                positions[size] += 1
    return out


def build_feed(events, cols=6):
    """Feed items with size and grid span; `events` are serialized dicts"""
    items = []
    for event, size in assign_sizes(events):
        items.append({
            'event': event,
            'size': size,
            'span': span_for(size, cols),
            'score': feed_score(event),
        })
    return items
