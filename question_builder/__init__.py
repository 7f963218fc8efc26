from __future__ import annotations  # Re-export question_builder public API

from .question_builder import BEHAVIORAL_ROTATION, CATEGORIES, Category, QuestionDraft, QuestionSetBuilder

__all__ = ["BEHAVIORAL_ROTATION", "CATEGORIES", "Category", "QuestionDraft", "QuestionSetBuilder"]
