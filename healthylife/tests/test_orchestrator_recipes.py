import unittest
from unittest import mock

from healthylife.domain.Cooldown import CooldownState, TEXT
from healthylife.logic.coach.errors import RateLimited
from healthylife.logic.coach.orchestrator import CoachOrchestrator, RecipeStage
from fakes import FakeProvider

GOOD = '{"recipes": [{"name": "Chickpea Salad", "items": ["Chickpeas", "Spinach"], "instructions": "Mix."}]}'
FENCED = "Here you go:\n```json\n" + GOOD + "\n```"
CART = [{"name": "Spinach", "quantity": 2}, {"name": "Chickpeas"}]


class TestCoachRecommend(unittest.IsolatedAsyncioTestCase):

    async def test_first_stage_success_skips_the_rest(self):
        perplexity = FakeProvider("perplexity", complete=[FENCED])
        gemini = FakeProvider("gemini")
        result = await CoachOrchestrator.from_providers(perplexity, gemini).recommend("veg", CART)

        self.assertEqual(result.source, "perplexity")
        self.assertEqual(result.meta["model"], "perplexity-complete")
        self.assertEqual(result.recipes[0]["name"], "Chickpea Salad")
        self.assertEqual(gemini.complete_calls, [])
        prompt = perplexity.complete_calls[0]["prompt"]
        self.assertIn("Spinach (x2), Chickpeas (x1)", prompt)
        self.assertIn("My diet preference is veg.", prompt)

    async def test_unparsable_first_stage_falls_to_gemini(self):
        perplexity = FakeProvider("perplexity", complete=["I cannot produce JSON today."])
        gemini = FakeProvider("gemini", complete=[GOOD])
        result = await CoachOrchestrator.from_providers(perplexity, gemini).recommend("veg", CART)

        self.assertEqual(result.source, "google")
        self.assertEqual(len(perplexity.complete_calls), 1)
        self.assertEqual(len(gemini.complete_calls), 1)

    async def test_empty_list_from_first_stage_falls_through(self):
        perplexity = FakeProvider("perplexity", complete=['{"recipes": []}'])
        gemini = FakeProvider("gemini", complete=[GOOD])
        result = await CoachOrchestrator.from_providers(perplexity, gemini).recommend("veg", CART)
        self.assertEqual(result.source, "google")

    async def test_gemini_retry_with_stricter_prompt(self):
        gemini = FakeProvider("gemini", complete=["Sure! Recipes below.", FENCED])
        result = await CoachOrchestrator.from_providers(gemini=gemini).recommend("non-veg", CART)

        self.assertEqual(result.source, "google")
        self.assertEqual(len(result.recipes), 1)
        first, retry = gemini.complete_calls
        self.assertIn("Rules:", first["prompt"])
        self.assertTrue(retry["prompt"].startswith("Return ONLY valid JSON. Shape:"))
        self.assertIn("Cart: Spinach, Chickpeas", retry["prompt"])
        self.assertEqual(retry["temperature"], 0.2)

    async def test_parse_failed_after_retry_returns_empty_marker(self):
        gemini = FakeProvider("gemini", complete=["no json", "still no json"])
        openai = FakeProvider("openai")
        result = await CoachOrchestrator.from_providers(gemini=gemini, openai=openai).recommend("veg", CART)

        self.assertEqual(result.recipes, [])
        self.assertEqual(result.meta, {"source": "google-parse-failed", "model": "gemini-complete"})
        self.assertEqual(len(gemini.complete_calls), 2)
        self.assertEqual(openai.complete_calls, [])

    async def test_gemini_accepts_empty_list(self):
        gemini = FakeProvider("gemini", complete=['{"recipes": []}'])
        result = await CoachOrchestrator.from_providers(gemini=gemini).recommend("veg", CART)
        self.assertEqual(result.source, "google")
        self.assertEqual(result.recipes, [])
        self.assertEqual(len(gemini.complete_calls), 1)

    async def test_google_label_only_for_recipes(self):
        gemini = FakeProvider("gemini", complete=[ConnectionError("down")])
        orch = CoachOrchestrator.from_providers(gemini=gemini)
        self.assertEqual(orch.describe()["recipes"], ["google"])
        self.assertEqual(orch.describe()["chat"], ["gemini"])

        custom = RecipeStage(FakeProvider("openai", complete=[GOOD]), "{diet} {cart}")
        result = await CoachOrchestrator(recipe_stages=[custom]).recommend("veg", CART)
        self.assertEqual(result.source, "openai")

    async def test_provider_errors_end_in_scored_static(self):
        cooldown = CooldownState()
        perplexity = FakeProvider("perplexity", complete=[RateLimited("429")])
        gemini = FakeProvider("gemini", complete=[ConnectionError("down")])
        orch = CoachOrchestrator.from_providers(perplexity, gemini, cooldown=cooldown)
        result = await orch.recommend("veg", CART)

        self.assertEqual(result.meta, {"source": "static"})
        self.assertEqual(result.recipes[0]["name"], "Quinoa Buddha Bowl")
        self.assertEqual(len(result.recipes), 2)
        # Recipe failures never cool down chat
        self.assertFalse(cooldown.is_cooling(TEXT))

    async def test_no_providers_scores_static_table(self):
        result = await CoachOrchestrator().recommend("veg", [{"name": "paneer"}, {"name": "Garlic"}])
        self.assertEqual(result.source, "static")
        self.assertEqual([r["name"] for r in result.recipes], ["Paneer Stir-fry", "Quinoa Buddha Bowl"])

    async def test_unexpected_error_gives_error_fallback(self):
        orch = CoachOrchestrator.from_providers(gemini=FakeProvider("gemini"))
        with mock.patch.object(orch, "_run_stage", side_effect=RuntimeError("kaboom")):
            result = await orch.recommend("veg", [{"name": "Paneer"}])

        self.assertEqual(result.meta, {"source": "error-fallback", "message": "kaboom"})
        self.assertEqual(result.recipes[0]["name"], "Paneer Stir-fry")

    async def test_unknown_diet_and_junk_cart(self):
        result = await CoachOrchestrator().recommend("keto", ["Spinach", None, {"name": "Chickpeas"}])
        self.assertEqual(result.diet, "veg")
        self.assertEqual(result.to_dict()["recipes"][0]["name"], "Quinoa Buddha Bowl")


if __name__ == '__main__':
    unittest.main()
