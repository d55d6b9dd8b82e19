# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Prompt templates for profile enhancement and recommendations."""

import json
from typing import Dict, get_args

from linkfolio.shared.profile_types import (
    EnhancementOptions,
    Focus,
    Length,
    LinkedInProfile,
    Tone,
)

ENHANCEMENT_SYSTEM_INSTRUCTION = (
    "You are an expert professional content writer specializing in career "
    "development and personal branding. Your task is to enhance LinkedIn profile "
    "content to make it more compelling, effective, and tailored to the "
    "individual's goals while maintaining accuracy."
)

RECOMMENDATIONS_SYSTEM_INSTRUCTION = (
    "You are an expert career advisor and personal branding consultant. Analyze "
    "this LinkedIn profile data and provide specific content recommendations to "
    "improve each section."
)

TONE_INSTRUCTIONS: Dict[str, str] = {
    "professional": "Use a professional tone.",
    "conversational": "Use a conversational tone.",
    "enthusiastic": "Use an enthusiastic tone.",
}

FOCUS_INSTRUCTIONS: Dict[str, str] = {
    "technical": "Focus on technical skills, expertise, and concrete implementation details.",
    "leadership": "Emphasize leadership qualities, team management, and strategic initiatives.",
    "creative": "Highlight creative problem-solving, innovation, and unique approaches.",
    "balanced": "Balance technical expertise with soft skills and business impact.",
}

LENGTH_INSTRUCTIONS: Dict[str, str] = {
    "concise": "Keep the content brief and to the point.",
    "detailed": "Provide a moderate level of detail that balances brevity and completeness.",
    "comprehensive": "Offer comprehensive details that showcase depth of expertise.",
}

HIGHLIGHT_ACHIEVEMENTS_INSTRUCTION = "Highlight specific achievements and results."
EMPHASIZE_SKILLS_INSTRUCTION = "Emphasize relevant skills and technologies."
INCLUDE_METRICS_INSTRUCTION = "Include metrics and quantifiable results where appropriate."

FINAL_INSTRUCTIONS = (
    "Provide only the enhanced content without explanations or additional "
    "commentary. Maintain the first-person perspective if present in the "
    "original. Ensure the content remains truthful and accurate to the original "
    "information while making it more impactful."
)

SKILLS_FORMAT_INSTRUCTION = (
    "Return the skills as a single comma-separated list and nothing else."
)

ENHANCEMENT_PROMPT_TEMPLATE = """Please enhance the following {section} section from a LinkedIn profile.

Original content:
"{content}"

{guidance}

{final}"""

RECOMMENDATIONS_PROMPT_TEMPLATE = """Please analyze this LinkedIn profile data and provide specific recommendations to improve and enhance the content for each section. Focus on making the profile more compelling, achievement-oriented, and professionally effective.

Profile data:
{profile}

Provide your recommendations in JSON format with the following structure:
{{
  "summary": ["recommendation 1", "recommendation 2"],
  "headline": ["recommendation 1"],
  "experiences": ["recommendation 1", "recommendation 2"],
  "skills": ["recommendation 1", "recommendation 2"],
  "general": ["recommendation 1", "recommendation 2"]
}}"""


def _require_all(table: Dict[str, str], options_type) -> None:
    missing = set(get_args(options_type)) - set(table)
    extra = set(table) - set(get_args(options_type))
    if missing or extra:
        raise RuntimeError(
            f"Instruction table out of sync: missing={sorted(missing)} extra={sorted(extra)}"
        )


_require_all(TONE_INSTRUCTIONS, Tone)
_require_all(FOCUS_INSTRUCTIONS, Focus)
_require_all(LENGTH_INSTRUCTIONS, Length)


def make_enhancement_prompt(
    section: str, content: str, options: EnhancementOptions
) -> str:
    """Builds the rewrite instruction for one profile section."""
    guidance = [
        TONE_INSTRUCTIONS[options.tone],
        FOCUS_INSTRUCTIONS[options.focus],
        LENGTH_INSTRUCTIONS[options.length],
    ]
    if options.highlight_achievements:
        guidance.append(HIGHLIGHT_ACHIEVEMENTS_INSTRUCTION)
    if options.emphasize_skills:
        guidance.append(EMPHASIZE_SKILLS_INSTRUCTION)
    if options.include_metrics:
        guidance.append(INCLUDE_METRICS_INSTRUCTION)
    if section == "skills":
        guidance.append(SKILLS_FORMAT_INSTRUCTION)

    return ENHANCEMENT_PROMPT_TEMPLATE.format(
        section=section,
        content=content,
        guidance=" ".join(guidance),
        final=FINAL_INSTRUCTIONS,
    )


def make_recommendations_prompt(profile: LinkedInProfile) -> str:
    """Builds the recommendation request from a digest of the profile."""
    digest = {
        "summary": profile.summary or "",
        "headline": profile.headline or "",
        "experiences": [
            {
                "title": exp.title or "",
                "company": exp.company or "",
                "description": exp.description or "",
            }
            for exp in profile.experiences or []
        ],
        "skills": profile.skills or [],
    }
    return RECOMMENDATIONS_PROMPT_TEMPLATE.format(profile=json.dumps(digest))

