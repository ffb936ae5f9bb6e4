"""
Event concierge: turn a free-text description into draft event fields.

Without CONCIERGE_API_URL a local keyword heuristic is used. When the URL is
set, the text is sent to that parsing service instead.
"""
import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

HEURISTIC_CONFIDENCE = 0.7

TITLE_KEYWORDS = ('party', 'event', 'opening')
LOCATION_KEYWORDS = ('at', 'in', 'on', 'near')

DATE_PATTERNS = [
    re.compile(r'(this|next)\s+(monday|tuesday|wednesday|thursday|friday|saturday|sunday)', re.IGNORECASE),
    re.compile(r'(today|tomorrow)', re.IGNORECASE),
    re.compile(r'(\d{1,2}/\d{1,2}/\d{4})'),
    re.compile(r'(\d{1,2}\s+(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*)', re.IGNORECASE),
]
TIME_PATTERN = re.compile(r'(\d{1,2}:\d{2}\s*(am|pm)?)', re.IGNORECASE)

# (phrases, event type); any phrase present adds the type
EVENT_TYPE_RULES = [
    (('party', 'celebration'), 'PARTY'),
    (('panel', 'discussion'), 'PANEL'),
    (('workshop', 'class'), 'WORKSHOP'),
    (('exhibition', 'show'), 'EXHIBITION'),
    (('happy hour', 'drinks'), 'HAPPY_HOUR'),
    (('lunch', 'dinner'), 'MEAL'),
]

FOOD_WORDS = ('food', 'drinks', 'refreshments')
VIRTUAL_WORDS = ('virtual', 'online', 'zoom')
SPONSORED_WORDS = ('sponsored', 'promoted')


class ConciergeError(Exception):
    """The external parsing service failed or answered garbage"""


def _extract_title(text):
    words = text.split(' ')
    for index, word in enumerate(words):
        if any(keyword in word.lower() for keyword in TITLE_KEYWORDS):
            title = ' '.join(words[:index + 3])
            return re.sub(r'[^\w\s]', '', title, flags=re.ASCII)
    return None


def _extract_location(text):
    for keyword in LOCATION_KEYWORDS:
        match = re.search(rf'\b{keyword}\b\s+(.+)', text, re.IGNORECASE)
        if match:
            location = ' '.join(match.group(1).strip().split(' ')[:3])
            if len(location) > 2:
                return location
    return None


def _extract_event_types(lowered):
    event_types = [event_type for phrases, event_type in EVENT_TYPE_RULES
                   if any(phrase in lowered for phrase in phrases)]
    if 'product' in lowered and 'reveal' in lowered:
        event_types.append('PRODUCT_REVEAL')
    return event_types


def follow_up_questions(extracted):
    questions = []
    if not extracted.get('title'):
        questions.append("What's the name of your event?")
    if not extracted.get('location') and not extracted.get('is_virtual'):
        questions.append('Where will this event take place?')
    if not extracted.get('start_date'):
        questions.append('When is this event happening?')
    if not extracted.get('event_types'):
        questions.append('What type of event is this? (e.g., party, workshop, panel)')
    return questions


def parse_event_text(text):
    """Keyword heuristic; returns extracted_data, follow_up_question and confidence"""
    lowered = text.lower()
    extracted = {}

    if any(keyword in lowered for keyword in TITLE_KEYWORDS):
        title = _extract_title(text)
        if title:
            extracted['title'] = title

    location = _extract_location(text)
    if location:
        extracted['location'] = location

    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            extracted['start_date'] = match.group(0)
            break

    time_match = TIME_PATTERN.search(text)
    if time_match:
        extracted['time'] = time_match.group(0)

    event_types = _extract_event_types(lowered)
    if event_types:
        extracted['event_types'] = event_types

    if any(word in lowered for word in FOOD_WORDS):
        extracted['includes_food'] = True
    if any(word in lowered for word in VIRTUAL_WORDS):
        extracted['is_virtual'] = True
    if any(word in lowered for word in SPONSORED_WORDS):
        extracted['is_sponsored'] = True
        extracted['promotion_tier'] = 1

    questions = follow_up_questions(extracted)
    return {
        'extracted_data': extracted,
        'follow_up_question': questions[0] if questions else None,
        'confidence': HEURISTIC_CONFIDENCE,
    }


def _parse_remote(text):
    headers = {'Content-Type': 'application/json'}
    if settings.CONCIERGE_API_KEY:
        headers['Authorization'] = f'Bearer {settings.CONCIERGE_API_KEY}'
    try:
        response = requests.post(settings.CONCIERGE_API_URL, json={'input': text}, headers=headers,
                                 timeout=settings.CONCIERGE_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        logger.error(f"Concierge service request failed: {str(e)}")
        raise ConciergeError('Event parsing service is unavailable')
    except ValueError:
        logger.error("Concierge service returned invalid JSON")
        raise ConciergeError('Event parsing service returned an invalid response')

    if not isinstance(payload, dict):
        raise ConciergeError('Event parsing service returned an invalid response')

    extracted = payload.get('extracted_data', payload.get('extractedData')) or {}
    if not isinstance(extracted, dict):
        logger.error(f"Concierge service returned extracted data of type {type(extracted).__name__}")
        raise ConciergeError('Event parsing service returned an invalid response')
    questions = follow_up_questions(extracted)
    return {
        'extracted_data': extracted,
        'follow_up_question': payload.get('follow_up_question', payload.get('followUpQuestion',
                                                                            questions[0] if questions else None)),
        'confidence': payload.get('confidence', HEURISTIC_CONFIDENCE),
    }


def parse_event_input(text):
    """
    Parse free text into event fields.

    Raises:
        ConciergeError: the configured parsing service failed
    """
    if settings.CONCIERGE_API_URL:
        result = _parse_remote(text)
    else:
        result = parse_event_text(text)
    logger.info(f"Concierge parsed {len(text)} chars, fields={sorted(result['extracted_data'].keys())}, "
                f"confidence={result['confidence']}")
    return result
