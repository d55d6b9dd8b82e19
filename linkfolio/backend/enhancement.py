"""
LLM-driven rewriting of profile sections and recommendation synthesis.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Union

import pydantic

from linkfolio.backend.errors import (
    EnhancementError,
    EnhancementTimeoutError,
    FormatError,
    ParseError,
)
from linkfolio.models import prompts
from linkfolio.models.gemini import (
    GeminiRequestException,
    GeminiTimeoutException,
    TextGenerator,
)
from linkfolio.shared.profile_types import (
    EnhancementOptions,
    LinkedInProfile,
    Recommendations,
)

logger = logging.getLogger(__name__)

ENHANCEMENT_TEMPERATURE = 0.7
ENHANCEMENT_MAX_OUTPUT_TOKENS = 1000
RECOMMENDATIONS_TEMPERATURE = 0.7
DEFAULT_MAX_WORKERS = 4

ProfileInput = Union[LinkedInProfile, Mapping, str]


def as_profile(profile: ProfileInput) -> LinkedInProfile:
    """Coerce a profile given as a model, a mapping or a JSON string."""
    if isinstance(profile, LinkedInProfile):
        return profile
    if isinstance(profile, str):
        try:
            profile = json.loads(profile)
        except json.JSONDecodeError as exc:
            raise FormatError("Invalid profile data format. Expected valid JSON.") from exc
    if not isinstance(profile, Mapping):
        raise FormatError("Invalid profile data format. Expected a JSON object.")
    try:
        return LinkedInProfile.model_validate(dict(profile))
    except pydantic.ValidationError as exc:
        raise FormatError(
            "Invalid profile data format. The profile does not match the expected shape."
        ) from exc


def split_skills(text: str) -> List[str]:
    return [skill.strip() for skill in text.split(",") if skill.strip()]


class EnhancementService:
    """Rewrites profile sections through a ``TextGenerator``."""

    def __init__(self, generator: TextGenerator, max_workers: int = DEFAULT_MAX_WORKERS):
        self.generator = generator
        self.max_workers = max_workers

    def enhance_section(
        self,
        section: str,
        text: str,
        options: Optional[EnhancementOptions] = None,
    ) -> str:
        """
        Rewrites one section of a profile.

        Returns the model's text verbatim, or ``text`` unchanged when the model
        returns no content.

        Raises:
            EnhancementTimeoutError: If the text-generation call timed out.
            EnhancementError: If the text-generation call failed.
        """
        options = options or EnhancementOptions()
        prompt = prompts.make_enhancement_prompt(section, text, options)
        try:
            enhanced = self.generator.generate(
                prompt,
                system_instruction=prompts.ENHANCEMENT_SYSTEM_INSTRUCTION,
                temperature=ENHANCEMENT_TEMPERATURE,
                max_output_tokens=ENHANCEMENT_MAX_OUTPUT_TOKENS,
            )
        except GeminiTimeoutException as exc:
            logger.warning("Enhancing %s section timed out: %s", section, exc)
            raise EnhancementTimeoutError() from exc
        except GeminiRequestException as exc:
            logger.error("Error enhancing %s section: %s", section, exc)
            raise EnhancementError() from exc
        return enhanced or text

    def enhance_skills(
        self, skills: List[str], options: Optional[EnhancementOptions] = None
    ) -> List[str]:
        """Enhances a skill list as one comma-separated section, always concise."""
        if not skills:
            return []
        options = (options or EnhancementOptions()).model_copy(update={"length": "concise"})
        enhanced = self.enhance_section("skills", ", ".join(skills), options)
        return split_skills(enhanced)

    def enhance_full_profile(
        self, profile: ProfileInput, options: Optional[EnhancementOptions] = None
    ) -> LinkedInProfile:
        """
        Enhances the summary, every experience description and the skills of a
        profile. Sections are enhanced concurrently; the input is not modified.
        """
        original = as_profile(profile)
        options = options or EnhancementOptions()
        enhanced = original.model_copy(deep=True)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            summary_future = None
            if original.summary:
                summary_future = pool.submit(
                    self.enhance_section, "summary", original.summary, options
                )
            experience_futures = {}
            for index, experience in enumerate(original.experiences or []):
                if experience.description:
                    experience_futures[index] = pool.submit(
                        self.enhance_section,
                        "experience",
                        experience.description,
                        options,
                    )
            skills_future = None
            if original.skills is not None:
                skills_future = pool.submit(self.enhance_skills, original.skills, options)

            if summary_future is not None:
                enhanced.summary = summary_future.result()
            for index, future in experience_futures.items():
                enhanced.experiences[index].description = future.result()
            if skills_future is not None:
                enhanced.skills = skills_future.result()

        return enhanced

    def generate_recommendations(self, profile: ProfileInput) -> Dict[str, List[str]]:
        """
        Asks for per-section improvement suggestions.

        Raises:
            ParseError: If the reply is not a JSON object with list-of-string
                values for the known sections.
            EnhancementError: If the text-generation call failed.
        """
        parsed_profile = as_profile(profile)
        prompt = prompts.make_recommendations_prompt(parsed_profile)
        try:
            content = self.generator.generate(
                prompt,
                system_instruction=prompts.RECOMMENDATIONS_SYSTEM_INSTRUCTION,
                temperature=RECOMMENDATIONS_TEMPERATURE,
                json_output=True,
            )
        except GeminiTimeoutException as exc:
            logger.warning("Generating recommendations timed out: %s", exc)
            raise EnhancementTimeoutError(
                "Generating content recommendations timed out. Please try again later."
            ) from exc
        except GeminiRequestException as exc:
            logger.error("Error generating content recommendations: %s", exc)
            raise EnhancementError(
                "Failed to generate content recommendations. Please try again later."
            ) from exc

        try:
            data = json.loads(content or "{}")
        except json.JSONDecodeError as exc:
            logger.error("Recommendations were not valid JSON: %s", exc)
            raise ParseError() from exc
        if not isinstance(data, dict):
            raise ParseError()
        try:
            return Recommendations.model_validate(data).model_dump()
        except pydantic.ValidationError as exc:
            logger.error("Recommendations had an unexpected shape: %s", exc)
            raise ParseError() from exc
