import json
import threading
import unittest

from linkfolio.backend.enhancement import EnhancementService, as_profile, split_skills
from linkfolio.backend.errors import (
    EnhancementError,
    EnhancementTimeoutError,
    FormatError,
    ParseError,
)
from linkfolio.models import prompts
from linkfolio.models.gemini import GeminiRequestException, GeminiTimeoutException
from linkfolio.shared.profile_types import EnhancementOptions, LinkedInProfile

PROFILE = {
    "firstName": "Sample",
    "lastName": "User",
    "headline": "Software Engineer",
    "summary": "Builds things.",
    "skills": [" Python", "SQL ", "", "Go"],
    "experiences": [
        {"title": "Engineer", "company": "Acme", "description": "Wrote code."},
        {"title": "Intern", "company": "Initech"},
    ],
}


def original_content(prompt: str) -> str:
    return prompt.split('Original content:\n"', 1)[1].rsplit('"\n\n', 1)[0]


class EchoGenerator:
    """Returns the section text it was asked to enhance."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def generate(self, prompt, **kwargs):
        with self._lock:
            self.calls.append((prompt, kwargs))
        return original_content(prompt)


class FixedGenerator:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error:
            raise self.error
        return self.reply


class PromptTests(unittest.TestCase):
    def test_prompt_is_deterministic_and_reflects_options(self):
        options = EnhancementOptions(
            tone="enthusiastic",
            focus="leadership",
            length="comprehensive",
            highlight_achievements=False,
            emphasize_skills=False,
            include_metrics=True,
        )
        prompt = prompts.make_enhancement_prompt("summary", "Hello.", options)
        self.assertEqual(prompt, prompts.make_enhancement_prompt("summary", "Hello.", options))
        self.assertIn("enhance the following summary section", prompt)
        self.assertIn('"Hello."', prompt)
        self.assertIn("Use an enthusiastic tone.", prompt)
        self.assertIn(prompts.FOCUS_INSTRUCTIONS["leadership"], prompt)
        self.assertIn(prompts.LENGTH_INSTRUCTIONS["comprehensive"], prompt)
        self.assertIn(prompts.INCLUDE_METRICS_INSTRUCTION, prompt)
        self.assertNotIn(prompts.HIGHLIGHT_ACHIEVEMENTS_INSTRUCTION, prompt)
        self.assertNotIn(prompts.EMPHASIZE_SKILLS_INSTRUCTION, prompt)

    def test_default_options(self):
        prompt = prompts.make_enhancement_prompt("experience", "x", EnhancementOptions())
        self.assertIn("Use a professional tone.", prompt)
        self.assertIn(prompts.FOCUS_INSTRUCTIONS["balanced"], prompt)
        self.assertIn(prompts.LENGTH_INSTRUCTIONS["detailed"], prompt)
        self.assertIn(prompts.HIGHLIGHT_ACHIEVEMENTS_INSTRUCTION, prompt)
        self.assertIn(prompts.EMPHASIZE_SKILLS_INSTRUCTION, prompt)
        self.assertNotIn(prompts.INCLUDE_METRICS_INSTRUCTION, prompt)

    def test_recommendations_prompt_contains_digest(self):
        prompt = prompts.make_recommendations_prompt(LinkedInProfile.model_validate(PROFILE))
        self.assertIn('"headline": "Software Engineer"', prompt)
        self.assertIn('"company": "Initech"', prompt)
        self.assertIn('"general": ["recommendation 1"', prompt)


class EnhanceSectionTests(unittest.TestCase):
    def test_returns_model_text_verbatim(self):
        generator = FixedGenerator(reply="  Better text.\n")
        service = EnhancementService(generator)
        self.assertEqual(service.enhance_section("summary", "Text."), "  Better text.\n")
        _, kwargs = generator.calls[0]
        self.assertEqual(kwargs["temperature"], 0.7)
        self.assertEqual(kwargs["max_output_tokens"], 1000)
        self.assertEqual(kwargs["system_instruction"], prompts.ENHANCEMENT_SYSTEM_INSTRUCTION)

    def test_empty_reply_returns_original(self):
        service = EnhancementService(FixedGenerator(reply=""))
        self.assertEqual(service.enhance_section("summary", "Text."), "Text.")

    def test_transport_failure_is_wrapped(self):
        service = EnhancementService(FixedGenerator(error=GeminiRequestException("boom")))
        with self.assertRaises(EnhancementError) as ctx:
            service.enhance_section("summary", "Text.")
        self.assertNotIsInstance(ctx.exception, EnhancementTimeoutError)
        self.assertIsInstance(ctx.exception.__cause__, GeminiRequestException)

    def test_timeout_is_distinct(self):
        service = EnhancementService(FixedGenerator(error=GeminiTimeoutException("slow")))
        with self.assertRaises(EnhancementTimeoutError):
            service.enhance_section("summary", "Text.")


class EnhanceFullProfileTests(unittest.TestCase):
    def test_identity_enhancement_round_trips_skills(self):
        generator = EchoGenerator()
        service = EnhancementService(generator)
        enhanced = service.enhance_full_profile(PROFILE, EnhancementOptions(length="comprehensive"))

        self.assertEqual(enhanced.skills, ["Python", "SQL", "Go"])
        self.assertEqual(enhanced.summary, "Builds things.")
        self.assertEqual(enhanced.experiences[0].description, "Wrote code.")
        self.assertIsNone(enhanced.experiences[1].description)
        # summary, one experience with a description, skills
        self.assertEqual(len(generator.calls), 3)
        skills_prompt = next(p for p, _ in generator.calls if "skills section" in p)
        self.assertIn(prompts.LENGTH_INSTRUCTIONS["concise"], skills_prompt)

    def test_skills_always_come_back_as_list(self):
        service = EnhancementService(FixedGenerator(reply="Python programming"))
        enhanced = service.enhance_full_profile(
            {"firstName": "A", "lastName": "B", "skills": ["Python"]},
            EnhancementOptions(length="concise"),
        )
        self.assertEqual(enhanced.skills, ["Python programming"])

    def test_input_is_not_mutated(self):
        profile = LinkedInProfile.model_validate(PROFILE)
        service = EnhancementService(FixedGenerator(reply="Rewritten."))
        enhanced = service.enhance_full_profile(profile)
        self.assertEqual(profile.summary, "Builds things.")
        self.assertEqual(enhanced.summary, "Rewritten.")
        self.assertEqual(enhanced.experiences[0].description, "Rewritten.")
        self.assertEqual(enhanced.first_name, "Sample")

    def test_failure_in_one_section_fails_the_profile(self):
        service = EnhancementService(FixedGenerator(error=GeminiRequestException("down")))
        with self.assertRaises(EnhancementError):
            service.enhance_full_profile(PROFILE)

    def test_split_skills(self):
        self.assertEqual(split_skills("a, b,,  c ,"), ["a", "b", "c"])
        self.assertEqual(split_skills(""), [])


class RecommendationTests(unittest.TestCase):
    def test_parses_expected_shape(self):
        reply = json.dumps({"summary": ["Add numbers"], "general": ["Add a photo"]})
        generator = FixedGenerator(reply=reply)
        result = EnhancementService(generator).generate_recommendations(PROFILE)
        self.assertEqual(result["summary"], ["Add numbers"])
        self.assertEqual(result["general"], ["Add a photo"])
        self.assertEqual(result["skills"], [])
        self.assertTrue(generator.calls[0][1]["json_output"])

    def test_empty_reply_yields_empty_sections(self):
        result = EnhancementService(FixedGenerator(reply="")).generate_recommendations(PROFILE)
        self.assertEqual(set(result), {"summary", "headline", "experiences", "skills", "general"})
        self.assertTrue(all(value == [] for value in result.values()))

    def test_invalid_json_raises_parse_error(self):
        service = EnhancementService(FixedGenerator(reply="not json"))
        with self.assertRaises(ParseError):
            service.generate_recommendations(PROFILE)

    def test_wrong_shape_raises_parse_error(self):
        for reply in ('["a"]', '{"summary": "one string"}', '{"other": ["x"]}', '{"skills": [1]}'):
            with self.subTest(reply=reply):
                service = EnhancementService(FixedGenerator(reply=reply))
                with self.assertRaises(ParseError):
                    service.generate_recommendations(PROFILE)

    def test_transport_failure(self):
        service = EnhancementService(FixedGenerator(error=GeminiRequestException("x")))
        with self.assertRaises(EnhancementError):
            service.generate_recommendations(PROFILE)

    def test_accepts_json_string_profile(self):
        service = EnhancementService(FixedGenerator(reply="{}"))
        self.assertEqual(service.generate_recommendations(json.dumps(PROFILE))["summary"], [])
        with self.assertRaises(FormatError):
            service.generate_recommendations("{not json")


class AsProfileTests(unittest.TestCase):
    def test_rejects_non_objects(self):
        with self.assertRaises(FormatError):
            as_profile("[1, 2]")
        with self.assertRaises(FormatError):
            as_profile({"skills": "Python"})


if __name__ == "__main__":
    unittest.main()
