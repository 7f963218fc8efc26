from __future__ import annotations  # Model-backed resume profile extraction

import logging
from textwrap import dedent
from typing import Literal, Optional, Tuple

from llm_gateway import LlmGatewayError, ModelClient, call

from .heuristics import extract_profile_fallback
from .models import Profile

logger = logging.getLogger(__name__)

ProfileSource = Literal["model", "fallback"]

MAX_PROMPT_CHARS = 12000


class ProfileExtractor:  # Resume text to Profile, model first then heuristics
    def __init__(self, model: Optional[ModelClient]) -> None:
        self._model = model

    def extract(self, text: str) -> Tuple[Profile, ProfileSource]:  # Never raises on model failure
        if self._model is None:
            logger.info("No profile model configured; using heuristic extraction")
            return extract_profile_fallback(text), "fallback"
        try:
            profile = call(_build_task(text), Profile, model=self._model)
        except LlmGatewayError as exc:
            logger.warning("Profile extraction failed, using heuristic fallback: %s", exc)
            return extract_profile_fallback(text), "fallback"
        if not profile.skills:
            logger.warning("Profile extraction returned no skills, using heuristic fallback")
            return extract_profile_fallback(text), "fallback"
        return profile, "model"


def _build_task(text: str) -> str:  # Build task prompt for LLM
    excerpt = text[:MAX_PROMPT_CHARS]
    return dedent(
        """
        You are an expert career assistant. Extract structured data from this resume:
        - skills: list of technical skills
        - projects: each with title, description, techStack, duration, role
        - internships: each with company, role, tasks, technologies, duration
        - education: each with degree, institution, years, gpa
        - experience: each with company, role, duration, responsibilities, technologies

        Resume text:
        {excerpt}

        Return only valid JSON with this exact structure:
        {{
          "skills": ["skill1", "skill2"],
          "projects": [{{"title": "", "description": "", "techStack": [], "duration": "", "role": ""}}],
          "internships": [{{"company": "", "role": "", "tasks": [], "technologies": [], "duration": ""}}],
          "education": [{{"degree": "", "institution": "", "years": "", "gpa": ""}}],
          "experience": [{{"company": "", "role": "", "duration": "", "responsibilities": [], "technologies": []}}]
        }}
        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip().format(excerpt=excerpt)
