"""Interview question set generation from a structured resume profile."""
from __future__ import annotations

import json
import logging
from textwrap import dedent
from typing import Any, List, Literal, Optional

from pydantic import BaseModel

from llm_gateway import LlmGatewayError, ModelClient, call_json
from resume_parsing import Profile

logger = logging.getLogger(__name__)

Category = Literal["technical", "project", "internship", "experience", "behavioral"]
CATEGORIES = ("technical", "project", "internship", "experience", "behavioral")

MAX_TECHNICAL = 3
MAX_PROJECTS = 2
MAX_DEEP_DIVES = 2
MAX_EXPERIENCE = 2
MAX_INTERNSHIPS = 1

BEHAVIORAL_ROTATION = (
    "Describe a time you received critical feedback and how you acted on it.",
    "Tell me about a time you had to meet a tight deadline. How did you prioritize your work?",
    "Describe a disagreement with a teammate and how you resolved it.",
    "Tell me about a mistake you made on a project and what you learned from it.",
    "Describe a situation where you had to learn a new technology quickly. How did you approach it?",
)


class QuestionDraft(BaseModel):  # Question text and category before persistence
    category: Category
    question: str


class QuestionSetBuilder:
    """Builds the ordered question list for a new interview.

    The model path asks for ``count`` resume-specific questions. When the call
    fails, or the reply is not a JSON array, or no usable item survives
    validation, the templated fallback is used instead.
    """

    def __init__(self, model: Optional[ModelClient], *, count: int = 10, deep_dives: int = 1) -> None:
        self._model = model
        self.count = count
        self.deep_dives = max(0, min(deep_dives, MAX_DEEP_DIVES))

    def build(self, profile: Profile) -> List[QuestionDraft]:
        if self._model is None:
            logger.info("No question model configured; using templated questions")
            return self.fallback(profile)
        try:
            raw = call_json(_build_task(profile, self.count), model=self._model)
        except LlmGatewayError as exc:
            logger.warning("Question generation failed, using templated questions: %s", exc)
            return self.fallback(profile)
        drafts = _parse_drafts(raw)
        if not drafts:
            logger.warning("Question generation returned no usable questions, using templated questions")
            return self.fallback(profile)
        return drafts[: self.count]

    def fallback(self, profile: Profile) -> List[QuestionDraft]:
        """Templated questions: technical, project, experience, internship, then behavioral filler."""

        drafts: List[QuestionDraft] = []
        for skill in profile.skills[:MAX_TECHNICAL]:
            drafts.append(
                QuestionDraft(
                    category="technical",
                    question=(
                        f"How have you used {skill} in practice? Describe what you built with it "
                        "and the challenges you ran into."
                    ),
                )
            )
        for index, project in enumerate(profile.projects[:MAX_PROJECTS]):
            stack = ", ".join(project.techStack) or "your chosen stack"
            drafts.append(
                QuestionDraft(
                    category="project",
                    question=(
                        f"Walk me through your project {project.title}, built with {stack}. "
                        "What were your design decisions and measurable outcomes?"
                    ),
                )
            )
            if index == 0:
                drafts.extend(_deep_dives(project.title, stack, self.deep_dives))
        for entry in profile.experience[:MAX_EXPERIENCE]:
            drafts.append(
                QuestionDraft(
                    category="experience",
                    question=(
                        f"At {entry.company} as {entry.role}, describe a hard problem you solved, "
                        "the scale you worked at, and its impact."
                    ),
                )
            )
        for entry in profile.internships[:MAX_INTERNSHIPS]:
            drafts.append(
                QuestionDraft(
                    category="internship",
                    question=(
                        f"During your internship as {entry.role} at {entry.company}, what did you build "
                        "and what did you learn technically?"
                    ),
                )
            )
        filler = 0
        while len(drafts) < self.count:
            drafts.append(
                QuestionDraft(
                    category="behavioral",
                    question=BEHAVIORAL_ROTATION[filler % len(BEHAVIORAL_ROTATION)],
                )
            )
            filler += 1
        return drafts[: self.count]


def _deep_dives(title: str, stack: str, limit: int) -> List[QuestionDraft]:  # Follow-up probes for one project
    templates = (
        f"In {title}, how did you test your work, and what would you change about your testing approach today?",
        f"In {title}, what performance bottlenecks did you hit with {stack}, and how did you resolve them?",
    )
    return [QuestionDraft(category="project", question=text) for text in templates[:limit]]


def _parse_drafts(raw: Any) -> List[QuestionDraft]:  # Accept a JSON array of {category, question}
    if not isinstance(raw, list):
        return []
    drafts: List[QuestionDraft] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        text = str(item.get("question") or "").strip()
        if not text:
            continue
        category = str(item.get("category") or "").strip().lower()
        if category not in CATEGORIES:
            category = "behavioral"
        drafts.append(QuestionDraft(category=category, question=text))
    return drafts


def _build_task(profile: Profile, count: int) -> str:  # Build task prompt for LLM
    resume_json = json.dumps(profile.model_dump(), ensure_ascii=False)
    return dedent(
        """
        You are an expert technical interviewer. Create {count} resume-specific questions that verify
        the candidate's actual experience and probe depth.

        Use the resume JSON strictly to tailor questions:
        - technical: target listed skills and technologies (internals, trade-offs)
        - project: ask about decisions, architecture, performance, testing, metrics
        - experience: validate responsibilities, challenges, impact, scale
        - internship: key learnings and applied concepts
        For projects and experience, include the specific title or company in the question.

        Resume JSON:
        {resume_json}

        Return a JSON array of exactly {count} items, each:
        {{"category": "technical|project|internship|experience|behavioral", "question": "..."}}
        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip().format(count=count, resume_json=resume_json)
