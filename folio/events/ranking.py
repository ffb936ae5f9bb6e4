"""
Event priority, tile-size suggestions and trending scores.

Priority drives the order of the events listing; trending covers events and
products alike and feeds the trending endpoints.
"""
import math

from django.utils import timezone

WEIGHT_MULTIPLIERS = {
    'ANCHOR': 3.0,
    'FLEX': 1.5,
    'BACKFILL': 0.8,
}

SPONSORSHIP_MULTIPLIERS = {
    'FREE': 1.0,
    'SPONSORED': 1.3,
    'PREMIUM': 2.0,
}

TRENDING_WEIGHTS = {
    'view': 0.1,
    'rsvp': 2.0,
    'media': 1.5,
    'product_scan': 0.5,
    'product_like': 1.0,
    'product_save': 1.5,
    'time_decay': 0.95,  # per day
    'recency_boost': 5.0,
    'featured_boost': 50.0,
    'boosted_boost': 30.0,
    'engagement_rate_multiplier': 2.0,
}

ENGAGEMENT_RATE_THRESHOLD = 0.1
SECONDS_PER_DAY = 60 * 60 * 24

SIZE_ORDER = ['S', 'M', 'L', 'XL']


def _rsvp_count(event):
    if getattr(event, 'rsvp_count', None) is not None:
        return event.rsvp_count
    if event.pk is None:
        return 0
    return event.rsvps.count()


def compute_priority_score(event, now=None):
    """
    Configured base score scaled by weight and sponsorship, plus engagement;
    finished events fade out over a year (never below 10%).
    """
    now = now or timezone.now()

    score = event.base_score or 0
    if event.weight:
        score *= WEIGHT_MULTIPLIERS.get(event.weight, 1.0)
    if event.sponsorship_tier:
        score *= SPONSORSHIP_MULTIPLIERS.get(event.sponsorship_tier, 1.0)

    if event.impression_count > 0:
        score += (event.click_count / event.impression_count) * 100
    score += _rsvp_count(event) * 2
    score += event.booking_count * 5
    score += event.save_count * 1.5

    ended = event.end_date or event.start_date
    if ended and ended < now:
        days_since_end = math.floor((now - ended).total_seconds() / SECONDS_PER_DAY)
        score *= max(0.1, 1 - days_since_end / 365)

    return max(0, score)


def _step(size, delta):
    index = SIZE_ORDER.index(size) + delta
    return SIZE_ORDER[max(0, min(index, len(SIZE_ORDER) - 1))]


def suggest_size_token(weight, sponsorship_tier, score):
    """XL/L/M/S tile size from event weight, sponsorship and priority score"""
    size = {'ANCHOR': 'XL', 'FLEX': 'L', 'BACKFILL': 'S'}.get(weight, 'M')

    if sponsorship_tier == 'PREMIUM' and size != 'XL':
        size = _step(size, 1)
    elif sponsorship_tier == 'SPONSORED' and size == 'S':
        size = 'M'

    if score > 1000 and size != 'XL':
        size = _step(size, 1)
    elif score > 500 and size == 'S':
        size = 'M'
    elif score < 50 and size != 'S':
        size = _step(size, -1)

    return size


def time_decay(created_at, now):
    days = max(0, (now - created_at).total_seconds() / SECONDS_PER_DAY)
    return TRENDING_WEIGHTS['time_decay'] ** days


def recency_boost(start_date, now):
    """Events within the coming week get a boost that grows as they approach"""
    if start_date is None:
        return 0
    days_until = math.ceil((start_date - now).total_seconds() / SECONDS_PER_DAY)
    if 0 <= days_until <= 7:
        return (7 - days_until) * TRENDING_WEIGHTS['recency_boost']
    return 0


def product_recency_boost(created_at, now):
    """Products get a shrinking boost during their first 30 days"""
    days = (now - created_at).total_seconds() / SECONDS_PER_DAY
    if days <= 30:
        return (30 - days) * 0.5
    return 0


def engagement_rate(views, engagements):
    if not views:
        return 0
    return engagements / views


def trending_score(factors):
    """Rounded trending score from a factors dict (see *_trending_factors)"""
    score = 0
    score += factors.get('view_count', 0) * TRENDING_WEIGHTS['view']
    score += factors.get('rsvp_count', 0) * TRENDING_WEIGHTS['rsvp']
    score += factors.get('media_count', 0) * TRENDING_WEIGHTS['media']
    score += factors.get('product_scan_count', 0) * TRENDING_WEIGHTS['product_scan']
    score += factors.get('product_like_count', 0) * TRENDING_WEIGHTS['product_like']
    score += factors.get('product_save_count', 0) * TRENDING_WEIGHTS['product_save']

    score *= factors.get('time_decay', 1)

    score += factors.get('recency_boost', 0)
    score += factors.get('featured_boost', 0)
    score += factors.get('boosted_boost', 0)

    if factors.get('engagement_rate', 0) > ENGAGEMENT_RATE_THRESHOLD:
        score *= TRENDING_WEIGHTS['engagement_rate_multiplier']

    return int(math.floor(score + 0.5))


def product_trending_factors(product, now=None):
    now = now or timezone.now()
    engagements = product.scan_count + product.like_count + product.save_count
    return {
        'view_count': product.view_count,
        'rsvp_count': 0,
        'media_count': 0,
        'product_scan_count': product.scan_count,
        'product_like_count': product.like_count,
        'product_save_count': product.save_count,
        'time_decay': time_decay(product.created_at, now),
        'recency_boost': product_recency_boost(product.created_at, now),
        'featured_boost': 0,
        'boosted_boost': 0,
        'engagement_rate': engagement_rate(product.view_count, engagements),
    }


def event_trending_factors(event, now=None, product_engagement=None):
    """
    Factors for an event. Engagement on the event's featured products counts
    as scans, like the product counters do.
    """
    now = now or timezone.now()
    rsvps = _rsvp_count(event)
    if product_engagement is None:
        product_engagement = sum(
            product.scan_count + product.like_count + product.save_count
            for product in event.products.all()
        ) if event.pk is not None else 0
    return {
        'view_count': event.view_count,
        'rsvp_count': rsvps,
        'media_count': 0,
        'product_scan_count': product_engagement,
        'product_like_count': 0,
        'product_save_count': 0,
        'time_decay': time_decay(event.created_at, now),
        'recency_boost': recency_boost(event.start_date, now),
        'featured_boost': TRENDING_WEIGHTS['featured_boost'] if event.is_featured else 0,
        'boosted_boost': TRENDING_WEIGHTS['boosted_boost'] if event.is_boosted else 0,
        'engagement_rate': engagement_rate(event.view_count, rsvps),
    }
