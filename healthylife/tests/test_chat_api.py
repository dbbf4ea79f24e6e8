import os
import unittest
from unittest import mock
import jwt
from fastapi.testclient import TestClient
from healthylife.api.api_run import app
from healthylife.api.api_ai import get_orchestrator, reset_orchestrator
from healthylife.domain.Cooldown import CooldownState
from healthylife.logic.coach.orchestrator import CoachOrchestrator
from healthylife.utilities.config import JWT_SECRET, JWT_ALGORITHM
from fakes import FakeProvider

PROVIDER_ENV = ('PERPLEXITY_API_KEY', 'GOOGLE_API_KEY', 'OPENAI_API_KEY', 'NUTRITIONIX_APP_ID', 'NUTRITIONIX_API_KEY')
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestChatWithoutCredentials(unittest.TestCase):
    """Real provider wiring with every key removed from the environment."""

    def setUp(self):
        self._saved = {k: os.environ.pop(k) for k in PROVIDER_ENV if k in os.environ}
        reset_orchestrator()
        self.client = TestClient(app)

    def tearDown(self):
        os.environ.update(self._saved)
        reset_orchestrator()

    def test_chat_returns_mock_reply(self):
        resp = self.client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'calories in rice?'}]})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['role'], 'assistant')
        self.assertEqual(data['meta'], {'source': 'mock'})
        self.assertIn('Estimate portions', data['content'])

    def test_recommend_uses_static_table(self):
        resp = self.client.post('/api/grocery/recommend',
                                json={'diet': 'veg', 'cart': [{'name': 'Spinach'}, {'name': 'Chickpeas'}]})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['meta'], {'source': 'static'})
        self.assertEqual(data['recipes'][0]['name'], 'Quinoa Buddha Bowl')

    def test_image_without_vision_key(self):
        resp = self.client.post('/api/chat/image', files={'image': ('meal.png', PNG, 'image/png')})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('not configured', resp.json()['message'])

    def test_health_reports_no_providers(self):
        resp = self.client.get('/api/health')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['providers'], {'perplexity': False, 'google': False, 'openai': False})
        self.assertFalse(data['nutritionix'])
        self.assertIn('strictFoodValidation', data)
        self.assertEqual(data['orchestrator']['chat'], [])
        self.assertIsNone(data['orchestrator']['vision'])
        self.assertEqual(data['orchestrator']['meals']['text'], 'mock')

    def test_recommend_accepts_any_json_body(self):
        for kwargs in ({'json': [{'name': 'Spinach'}]}, {'json': 'spinach'},
                       {'content': b'{bad', 'headers': {'Content-Type': 'application/json'}}, {}):
            resp = self.client.post('/api/grocery/recommend', **kwargs)
            self.assertEqual(resp.status_code, 200, kwargs)
            data = resp.json()
            self.assertEqual(data['meta'], {'source': 'static'})
            self.assertEqual(data['diet'], 'veg')

    def test_shutdown_does_not_build_orchestrator(self):
        with mock.patch('healthylife.api.api_ai.build_providers') as build:
            with TestClient(app) as client:
                self.assertEqual(client.get('/api/grocery').status_code, 200)
        build.assert_not_called()


class TestChatAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self.perplexity = FakeProvider('perplexity', chat=['Have some dal.'],
                                       complete=['```json\n{"recipes": [{"name": "Dal", "items": ["Lentils"], "instructions": "Boil."}]}\n```'])
        self.gemini = FakeProvider('gemini', vision=['Grilled fish, about 350 kcal.'])
        self.orchestrator = CoachOrchestrator.from_providers(self.perplexity, self.gemini, cooldown=CooldownState())
        app.dependency_overrides[get_orchestrator] = lambda: self.orchestrator

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_chat_uses_first_provider(self):
        resp = self.client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'Lunch idea?'}], 'diet': 'non-veg'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {'role': 'assistant', 'content': 'Have some dal.', 'meta': {'source': 'perplexity'}})
        self.assertIn('diet preference is non-veg', self.perplexity.chat_calls[0]['system'])
        self.assertEqual(self.gemini.chat_calls, [])

    def test_diet_from_token_claim(self):
        token = jwt.encode({'id': 'u-7', 'dietPreference': 'non-veg'}, JWT_SECRET, algorithm=JWT_ALGORITHM)
        resp = self.client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'hi'}]},
                                headers={'Authorization': f'Bearer {token}'})
        self.assertEqual(resp.status_code, 200)
        self.assertIn('diet preference is non-veg', self.perplexity.chat_calls[0]['system'])

    def test_invalid_token_is_anonymous_on_chat(self):
        resp = self.client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'hi'}]},
                                headers={'Authorization': 'Bearer not-a-jwt'})
        self.assertEqual(resp.status_code, 200)
        self.assertIn('diet preference is veg', self.perplexity.chat_calls[0]['system'])

    def test_chat_requires_messages(self):
        resp = self.client.post('/api/chat', json={'diet': 'veg'})
        self.assertEqual(resp.status_code, 422)

    def test_recommend_from_provider(self):
        resp = self.client.post('/api/grocery/recommend', json={'diet': 'veg', 'cart': [{'name': 'Lentils', 'quantity': 3}]})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['diet'], 'veg')
        self.assertEqual(data['recipes'], [{'name': 'Dal', 'items': ['Lentils'], 'instructions': 'Boil.'}])
        self.assertEqual(data['meta'], {'source': 'perplexity', 'model': 'perplexity-complete'})
        self.assertIn('Lentils (x3)', self.perplexity.complete_calls[0]['prompt'])

    def test_recommend_tolerates_bad_cart(self):
        resp = self.client.post('/api/grocery/recommend', json={'diet': 'veg', 'cart': 'spinach'})
        self.assertEqual(resp.status_code, 200)
        # A non-list cart is treated as empty
        self.assertIn('items in my cart: .', self.perplexity.complete_calls[0]['prompt'])

    def test_recommend_list_body_with_provider(self):
        resp = self.client.post('/api/grocery/recommend', json=[{'name': 'Lentils'}])
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['meta']['source'], 'perplexity')
        self.assertIn('items in my cart: .', self.perplexity.complete_calls[0]['prompt'])

    def test_image_chat(self):
        resp = self.client.post('/api/chat/image', files={'image': ('fish.jpg', PNG, 'image/jpeg')})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['content'], 'Grilled fish, about 350 kcal.')
        self.assertEqual(data['meta'], {'source': 'gemini', 'vision': True})

    def test_image_wrong_type(self):
        resp = self.client.post('/api/chat/image', files={'image': ('notes.txt', b'hello', 'text/plain')})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.gemini.vision_calls, [])

    def test_image_missing(self):
        resp = self.client.post('/api/chat/image', files={'other': ('x.png', PNG, 'image/png')})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {'message': 'image is required'})

    def test_image_provider_failure_is_502(self):
        self.gemini._outcomes['vision'] = [ConnectionError('gemini down')]
        resp = self.client.post('/api/chat/image', files={'image': ('meal.png', PNG, 'image/png')})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()['provider'], 'gemini')

    def test_grocery_static_plan(self):
        resp = self.client.get('/api/grocery', params={'diet': 'non-veg', 'week': '2025-03-03'})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['week'], '2025-03-03')
        self.assertEqual(data['meta'], {'source': 'static'})
        self.assertIn({'name': 'Eggs'}, data['items'])


if __name__ == '__main__':
    unittest.main()
