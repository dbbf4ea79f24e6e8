import unittest
from healthylife.logic.coach.errors import ParseFailure
from healthylife.logic.coach.parsing import parse_json_object, parse_recipes


class TestRecipeParsing(unittest.TestCase):

    def test_fenced_json_inside_prose(self):
        raw = (
            "Sure! Here are some ideas:\n"
            "```json\n"
            '{ "recipes": [ {"name": "Lentil Soup", "items": ["Lentils", "Carrots"], "instructions": "Simmer."},'
            ' {"name": "Salad", "items": ["Spinach"], "instructions": "Toss.", "extra": 1} ] }\n'
            "```\n"
            "Enjoy your meals!"
        )
        recipes = parse_recipes(raw)
        self.assertEqual(recipes, [
            {"name": "Lentil Soup", "items": ["Lentils", "Carrots"], "instructions": "Simmer."},
            {"name": "Salad", "items": ["Spinach"], "instructions": "Toss.", "extra": 1},
        ])

    def test_plain_json(self):
        self.assertEqual(parse_recipes('{"recipes": []}'), [])

    def test_trailing_commas_tolerated(self):
        recipes = parse_recipes('{"recipes": [{"name": "A", "items": ["x",],},]}')
        self.assertEqual(recipes[0]["name"], "A")

    def test_missing_recipes_field(self):
        with self.assertRaises(ParseFailure):
            parse_recipes('{"meals": []}')

    def test_recipes_not_a_list(self):
        with self.assertRaises(ParseFailure):
            parse_recipes('{"recipes": "none today"}')

    def test_prose_only(self):
        with self.assertRaises(ParseFailure):
            parse_recipes("I'm sorry, I cannot help with that.")

    def test_broken_json(self):
        with self.assertRaises(ParseFailure) as ctx:
            parse_recipes('```json {"recipes": [ {"name": "A" ] ```', provider="gemini")
        self.assertEqual(ctx.exception.provider, "gemini")

    def test_empty_and_none(self):
        for raw in ("", None, "{}"):
            with self.assertRaises(ParseFailure):
                parse_recipes(raw)

    def test_top_level_array_rejected(self):
        with self.assertRaises(ParseFailure):
            parse_recipes('[{"name": "A"}]')


class TestJsonObject(unittest.TestCase):

    def test_verdict_in_fences_with_trailing_comma(self):
        raw = 'Answer:\n```json\n{"isFood": true, "confidence": 0.9, "label": "idli",}\n```'
        self.assertEqual(parse_json_object(raw), {'isFood': True, 'confidence': 0.9, 'label': 'idli'})

    def test_array_is_not_an_object(self):
        with self.assertRaises(ParseFailure):
            parse_json_object('[1, 2]', provider='openai')

    def test_none_is_a_parse_failure(self):
        with self.assertRaises(ParseFailure) as ctx:
            parse_json_object(None, provider='gemini')
        self.assertEqual(ctx.exception.provider, 'gemini')


if __name__ == '__main__':
    unittest.main()
