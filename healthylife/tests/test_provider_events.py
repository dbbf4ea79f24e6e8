import unittest
from fastapi.testclient import TestClient

from healthylife.api.api_run import app
from healthylife.events import web_observers
from healthylife.events.Event_Bus import EventBus
from healthylife.events.event_helpers import publish_fallback, publish_provider_failed, publish_rate_limited
from healthylife.logic.coach.orchestrator import CoachOrchestrator
from healthylife.logic.coach.errors import RateLimited
from fakes import FakeProvider


class TestProviderEvents(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        web_observers.start()
        web_observers.clear()

    async def test_orchestrator_publishes_events(self):
        orch = CoachOrchestrator([FakeProvider('perplexity', chat=[RateLimited('429')]),
                                  FakeProvider('openai', chat=[ConnectionError('down')])])
        await orch.chat([])

        types = [e['type'] for e in web_observers.get_events()['events']]
        self.assertEqual(types, ['provider.rate_limited', 'provider.failed', 'coach.fallback'])
        first = web_observers.get_events()['events'][0]
        self.assertEqual(first['provider'], 'perplexity')
        self.assertEqual(first['capability'], 'text')
        self.assertEqual(first['cooldown'], 30)

    def test_cursor_and_endpoint(self):
        publish_rate_limited('gemini', 'vision', 30)
        publish_provider_failed('openai', 'text', 'timeout')
        publish_fallback('recipes', 'static', 'no provider answered')

        page = web_observers.get_events(since=1)
        self.assertEqual([e['id'] for e in page['events']], [2, 3])
        self.assertEqual(page['next_cursor'], 3)

        resp = TestClient(app).get('/api/provider-events', params={'since': 2})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(len(data['events']), 1)
        self.assertEqual(data['events'][0]['source'], 'static')

    def test_filter_by_provider(self):
        publish_rate_limited('gemini', 'vision', 30)
        publish_provider_failed('openai', 'text', 'timeout')
        publish_provider_failed('gemini', 'text', '401')

        page = web_observers.get_events(provider='gemini')
        self.assertEqual([e['id'] for e in page['events']], [1, 3])
        self.assertEqual(page['next_cursor'], 3)
        self.assertEqual(web_observers.get_events(since=3, provider='gemini')['events'], [])

    def test_buffer_is_capped(self):
        for i in range(web_observers.MAX_EVENTS + 5):
            publish_fallback('text', 'mock', str(i))
        events = web_observers.get_events()['events']
        self.assertEqual(len(events), web_observers.MAX_EVENTS)
        self.assertEqual(events[0]['id'], 6)

    def test_start_is_idempotent(self):
        web_observers.start()
        publish_fallback('text', 'mock', 'once')
        self.assertEqual(len(web_observers.get_events()['events']), 1)

    def test_broken_subscriber_does_not_break_publisher(self):
        bus = EventBus()
        seen = []

        def broken(name, payload):
            raise RuntimeError('boom')

        bus.subscribe('x', broken)
        bus.subscribe('x', lambda name, payload: seen.append(payload))
        bus.publish('x', {'a': 1})
        self.assertEqual(seen, [{'a': 1}])


if __name__ == '__main__':
    unittest.main()
