"""
Tests for events: ranking, feed sizing, concierge parsing, visibility and the API
"""
from datetime import timedelta
from unittest import mock

import requests
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .concierge import parse_event_text, parse_event_input, ConciergeError
from .feed import assign_sizes, build_feed, feed_score
from .models import Event, EventRSVP
from .ranking import compute_priority_score, suggest_size_token, trending_score, recency_boost
from .visibility import visible_events_for


class PriorityScoreTests(SimpleTestCase):

    def setUp(self):
        self.now = timezone.now()

    def make_event(self, **kwargs):
        defaults = {'title': 'Launch', 'start_date': self.now + timedelta(days=3), 'base_score': 100}
        defaults.update(kwargs)
        return Event(**defaults)

    def test_multipliers(self):
        event = self.make_event(weight='ANCHOR', sponsorship_tier='PREMIUM')
        self.assertEqual(compute_priority_score(event, self.now), 600)

    def test_engagement(self):
        event = self.make_event(base_score=0, impression_count=200, click_count=20, booking_count=2, save_count=4)
        # 10 CTR points + 10 bookings + 6 saves
        self.assertAlmostEqual(compute_priority_score(event, self.now), 26)

    def test_finished_events_decay(self):
        ended = self.now - timedelta(days=73, hours=1)
        event = self.make_event(start_date=ended - timedelta(hours=2), end_date=ended)
        self.assertAlmostEqual(compute_priority_score(event, self.now), 150 * 0.8)

    def test_decay_floor(self):
        ended = self.now - timedelta(days=800)
        event = self.make_event(start_date=ended, end_date=ended)
        self.assertAlmostEqual(compute_priority_score(event, self.now), 150 * 0.1)

    def test_size_token(self):
        self.assertEqual(suggest_size_token('ANCHOR', 'FREE', 100), 'XL')
        self.assertEqual(suggest_size_token('ANCHOR', 'FREE', 10), 'L')
        self.assertEqual(suggest_size_token('BACKFILL', 'SPONSORED', 100), 'M')
        self.assertEqual(suggest_size_token('FLEX', 'PREMIUM', 1500), 'XL')
        self.assertEqual(suggest_size_token('FLEX', 'FREE', 10), 'M')
        self.assertEqual(suggest_size_token(None, 'FREE', 100), 'M')


class TrendingScoreTests(SimpleTestCase):

    def test_weighted_sum(self):
        self.assertEqual(trending_score({'view_count': 100, 'rsvp_count': 5}), 20)

    def test_engagement_rate_doubles(self):
        self.assertEqual(trending_score({'view_count': 100, 'rsvp_count': 5, 'engagement_rate': 0.5}), 40)

    def test_boosts_are_not_decayed(self):
        factors = {'view_count': 100, 'time_decay': 0.5, 'featured_boost': 50}
        self.assertEqual(trending_score(factors), 55)

    def test_recency_boost(self):
        now = timezone.now()
        self.assertEqual(recency_boost(now + timedelta(days=2), now), 25)
        self.assertEqual(recency_boost(now + timedelta(days=10), now), 0)
        self.assertEqual(recency_boost(now - timedelta(days=2), now), 0)


class FeedTests(SimpleTestCase):

    def test_feed_score(self):
        event = {'rsvp_count': 2, 'view_count': 10, 'event_types': ['PARTY'], 'is_sponsored': True}
        self.assertEqual(feed_score(event), 6 + 5 + 50 + 80)

    def test_interleaved_sizes(self):
        events = [{'id': i, 'rsvp_count': 10 - i} for i in range(10)]
        sized = assign_sizes(events)
        self.assertEqual([size for _, size in sized], ['L', 'M', 'S', 'M', 'S', 'M', 'L', 'M', 'M', 'M'])
        self.assertEqual([event['id'] for event, _ in sized], [0, 2, 8, 3, 9, 4, 1, 5, 6, 7])

    def test_small_feeds(self):
        self.assertEqual(assign_sizes([]), [])
        sized = assign_sizes([{'id': 1}])
        self.assertEqual(sized, [({'id': 1}, 'L')])

    def test_spans(self):
        items = build_feed([{'id': 1, 'rsvp_count': 3}], cols=2)
        self.assertEqual(items[0]['span'], {'col_span': 2, 'row_span': 30})
        self.assertEqual(items[0]['score'], 9)


@override_settings(CONCIERGE_API_URL='')
class ConciergeTests(SimpleTestCase):

    def test_full_description(self):
        result = parse_event_text('Launch party at Studio Nine Austin next friday 7:00 pm with food and drinks')
        data = result['extracted_data']
        self.assertEqual(data['title'], 'Launch party at Studio')
        self.assertEqual(data['location'], 'Studio Nine Austin')
        self.assertEqual(data['start_date'], 'next friday')
        self.assertEqual(data['time'], '7:00 pm')
        self.assertEqual(data['event_types'], ['PARTY', 'HAPPY_HOUR'])
        self.assertTrue(data['includes_food'])
        self.assertIsNone(result['follow_up_question'])
        self.assertEqual(result['confidence'], 0.7)

    def test_product_reveal_and_sponsorship(self):
        data = parse_event_text('Sponsored product reveal event tomorrow')['extracted_data']
        self.assertIn('PRODUCT_REVEAL', data['event_types'])
        self.assertTrue(data['is_sponsored'])
        self.assertEqual(data['promotion_tier'], 1)
        self.assertEqual(data['start_date'], 'tomorrow')

    def test_follow_up_question(self):
        result = parse_event_text('something online')
        self.assertTrue(result['extracted_data']['is_virtual'])
        self.assertEqual(result['follow_up_question'], "What's the name of your event?")

    @override_settings(CONCIERGE_API_URL='http://concierge.test/parse')
    def test_remote_failure(self):
        with mock.patch('folio.events.concierge.requests.post', side_effect=requests.ConnectionError('down')):
            with self.assertRaises(ConciergeError):
                parse_event_input('Launch party')

    @override_settings(CONCIERGE_API_URL='http://concierge.test/parse')
    def test_remote_success(self):
        response = mock.Mock()
        response.json.return_value = {'extractedData': {'title': 'Gala'}, 'confidence': 0.9}
        with mock.patch('folio.events.concierge.requests.post', return_value=response) as post:
            result = parse_event_input('Gala at the museum')
        post.assert_called_once()
        self.assertEqual(post.call_args.kwargs['json'], {'input': 'Gala at the museum'})
        self.assertEqual(result['extracted_data'], {'title': 'Gala'})
        self.assertEqual(result['confidence'], 0.9)
        self.assertEqual(result['follow_up_question'], 'Where will this event take place?')

    @override_settings(CONCIERGE_API_URL='http://concierge.test/parse')
    def test_remote_non_object_extracted_data(self):
        response = mock.Mock()
        response.json.return_value = {'extracted_data': ['not', 'a', 'dict']}
        with mock.patch('folio.events.concierge.requests.post', return_value=response):
            with self.assertRaises(ConciergeError):
                parse_event_input('Gala at the museum')


class VisibilityTests(TestCase):

    def setUp(self):
        self.vendor = TestDataFactory.create_vendor()
        self.approved = TestDataFactory.create_event(title='Approved')
        self.unapproved = TestDataFactory.create_event(self.vendor, title='Unapproved', is_approved=False)
        self.private = TestDataFactory.create_event(title='Private', is_public=False)
        self.draft = TestDataFactory.create_event(title='Draft', status='draft')
        self.past = TestDataFactory.create_event(title='Past', start_in_days=-3)

    def titles(self, queryset):
        return set(queryset.values_list('title', flat=True))

    def test_homeowner_sees_approved_public(self):
        self.assertEqual(self.titles(visible_events_for('homeowner')), {'Approved'})

    def test_vendor_sees_public_and_own(self):
        self.assertEqual(self.titles(visible_events_for('vendor', self.vendor.id)), {'Approved', 'Unapproved'})
        other = TestDataFactory.create_vendor()
        self.assertEqual(self.titles(visible_events_for('vendor', other.id)), {'Approved', 'Unapproved'})

    def test_vendor_private_event_only_for_creator(self):
        own_private = TestDataFactory.create_event(self.vendor, title='Own Private', is_public=False,
                                                   is_approved=False)
        self.assertIn(own_private.title, self.titles(visible_events_for('vendor', self.vendor.id)))
        self.assertNotIn(own_private.title, self.titles(visible_events_for('vendor', None)))

    def test_admin_sees_all_published(self):
        self.assertEqual(self.titles(visible_events_for('admin')), {'Approved', 'Unapproved', 'Private'})
        self.assertIn('Draft', self.titles(visible_events_for('admin', include_drafts=True)))

    def test_past_events_when_not_upcoming_only(self):
        self.assertIn('Past', self.titles(visible_events_for('homeowner', upcoming_only=False)))


class EventAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.vendor = TestDataFactory.create_vendor(company_name='Oak & Iron')
        self.admin = TestDataFactory.create_admin()
        self.homeowner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def event_payload(self, **kwargs):
        start = timezone.now() + timedelta(days=5)
        payload = {
            'title': 'Spring Launch',
            'start_date': start.isoformat(),
            'end_date': (start + timedelta(hours=2)).isoformat(),
            'event_types': ['party'],
        }
        payload.update(kwargs)
        return payload

    def test_vendor_create_needs_approval(self):
        self.client.authenticate_user(self.vendor)
        response = self.client.post('/api/v1/events/', self.event_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_approved'])
        self.assertEqual(response.data['host_name'], 'Oak & Iron')
        self.assertEqual(response.data['event_types'], ['PARTY'])
        self.assertEqual(response.data['slug'], 'spring-launch')

    def test_admin_create_is_approved(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/events/', self.event_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_approved'])

    def test_homeowner_cannot_create(self):
        self.client.authenticate_user(self.homeowner)
        response = self.client.post('/api/v1/events/', self.event_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_event(self):
        self.client.authenticate_user(self.admin)
        start = timezone.now() + timedelta(days=5)
        response = self.client.post('/api/v1/events/', self.event_payload(
            end_date=(start - timedelta(days=1)).isoformat()), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/events/', self.event_payload(event_types=['RAVE']), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_orders_by_priority(self):
        TestDataFactory.create_event(title='Low', base_score=10)
        TestDataFactory.create_event(title='High', base_score=100, start_in_days=20)
        self.client.authenticate_user(self.homeowner)
        response = self.client.get('/api/v1/events/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['title'] for e in response.data['results']], ['High', 'Low'])

        response = self.client.get('/api/v1/events/?sort=date')
        self.assertEqual([e['title'] for e in response.data['results']], ['Low', 'High'])

    def test_list_type_filter(self):
        TestDataFactory.create_event(title='Panel Night', event_types=['PANEL'])
        TestDataFactory.create_event(title='Rooftop Party', event_types=['PARTY'])
        self.client.authenticate_user(self.homeowner)
        response = self.client.get('/api/v1/events/?type=panel')
        self.assertEqual([e['title'] for e in response.data['results']], ['Panel Night'])

    def test_detail_counts_view(self):
        event = TestDataFactory.create_event()
        self.client.authenticate_user(self.homeowner)
        response = self.client.get(f'/api/v1/events/{event.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['view_count'], 1)
        self.assertIsNone(response.data['my_rsvp'])
        event.refresh_from_db()
        self.assertEqual(event.view_count, 1)

    def test_unapproved_event_hidden(self):
        event = TestDataFactory.create_event(self.vendor, is_approved=False)
        self.client.authenticate_user(self.homeowner)
        self.assertEqual(self.client.get(f'/api/v1/events/{event.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.client.authenticate_user(self.vendor)
        self.assertEqual(self.client.get(f'/api/v1/events/{event.id}/').status_code, status.HTTP_200_OK)

    def test_only_creator_vendor_edits(self):
        event = TestDataFactory.create_event(self.vendor)
        self.client.authenticate_user(TestDataFactory.create_vendor())
        response = self.client.patch(f'/api/v1/events/{event.id}/', {'title': 'Mine now'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.vendor)
        response = self.client.patch(f'/api/v1/events/{event.id}/', {'title': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Renamed')

    def test_rsvp_flow(self):
        event = TestDataFactory.create_event()
        self.client.authenticate_user(self.homeowner)
        url = f'/api/v1/events/{event.id}/rsvp/'

        response = self.client.post(url, {'status': 'attending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['counts']['attending'], 1)

        response = self.client.patch(url, {'status': 'interested'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts'], {'attending': 0, 'interested': 1, 'send_to_team': 0})
        self.assertEqual(EventRSVP.objects.filter(event=event).count(), 1)

        response = self.client.post(url, {'status': 'maybe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(url)
        self.assertEqual(response.data['counts']['interested'], 0)

    def test_rsvp_capacity(self):
        event = TestDataFactory.create_event(max_attendees=1)
        TestDataFactory.create_rsvp(event, TestDataFactory.create_user())
        self.client.authenticate_user(self.homeowner)
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/', {'status': 'ATTENDING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/', {'status': 'INTERESTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_approval(self):
        event = TestDataFactory.create_event(self.vendor, is_approved=False)
        self.client.authenticate_user(self.vendor)
        self.assertEqual(self.client.post(f'/api/v1/events/{event.id}/approve/').status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/events/pending/')
        self.assertEqual(response.data['total'], 1)
        response = self.client.post(f'/api/v1/events/{event.id}/approve/', {'approved': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_approved'])
        self.assertEqual(self.client.get('/api/v1/events/pending/').data['total'], 0)

    def test_feed(self):
        for i in range(3):
            TestDataFactory.create_event(title=f'Feed {i}')
        self.client.authenticate_user(self.homeowner)
        response = self.client.get('/api/v1/events/feed/?width=700')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cols'], 2)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual([item['size'] for item in response.data['items']], ['L', 'M', 'L'])

    def test_trending(self):
        TestDataFactory.create_event(title='Featured', is_featured=True)
        TestDataFactory.create_event(title='Quiet', start_in_days=30)
        self.client.authenticate_user(self.homeowner)
        response = self.client.get('/api/v1/events/trending/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['title'] for e in response.data], ['Featured'])
        self.assertEqual(response.data[0]['trending_score'], 50)

    @override_settings(CONCIERGE_API_URL='')
    def test_concierge_endpoint(self):
        self.client.authenticate_user(self.vendor)
        response = self.client.post('/api/v1/event-concierge/parse/', {'input': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/event-concierge/parse/',
                                    {'input': 'Workshop at Dwell Studio tomorrow'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['extracted_data']['event_types'], ['WORKSHOP'])

    @override_settings(CONCIERGE_API_URL='http://concierge.test/parse')
    def test_concierge_endpoint_bad_remote_data(self):
        remote = mock.Mock()
        remote.json.return_value = {'extractedData': 'Gala on Friday'}
        self.client.authenticate_user(self.vendor)
        with mock.patch('folio.events.concierge.requests.post', return_value=remote):
            response = self.client.post('/api/v1/event-concierge/parse/', {'input': 'Gala on Friday'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_limit_is_clamped(self):
        TestDataFactory.create_event(title='First', is_featured=True)
        TestDataFactory.create_event(title='Second', is_featured=True, start_in_days=9)
        self.client.authenticate_user(self.homeowner)
        response = self.client.get('/api/v1/events/?limit=0')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['page_size'], 1)
        self.assertEqual(len(response.data['results']), 1)
        response = self.client.get('/api/v1/events/trending/?limit=-1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_ranking_fields_are_admin_only(self):
        ranking = {'base_score': 500, 'is_featured': True, 'is_boosted': True, 'sponsorship_tier': 'PREMIUM'}
        self.client.authenticate_user(self.vendor)
        response = self.client.post('/api/v1/events/', self.event_payload(**ranking), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = Event.objects.get(pk=response.data['id'])
        self.assertFalse(event.is_featured)
        self.assertFalse(event.is_boosted)
        self.assertEqual(event.sponsorship_tier, 'FREE')
        self.assertNotEqual(event.base_score, 500)

        response = self.client.patch(f'/api/v1/events/{event.id}/', {'is_featured': True, 'title': 'Renamed'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        event.refresh_from_db()
        self.assertFalse(event.is_featured)
        self.assertEqual(event.title, 'Renamed')

        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/events/', self.event_payload(title='Showcase', **ranking), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = Event.objects.get(pk=response.data['id'])
        self.assertTrue(event.is_featured)
        self.assertEqual(event.base_score, 500)
        self.assertEqual(event.sponsorship_tier, 'PREMIUM')
