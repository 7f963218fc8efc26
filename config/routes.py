"""LLM route configuration loaded from ``app_config.json``."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

PROFILE_KEY = "resume.extract_profile"
QUESTIONS_KEY = "questions.generate"
EVALUATION_KEY = "evaluation.evaluate_answer"
NARRATIVE_KEY = "reports.narrative"
TRANSCRIBE_KEY = "speech.transcribe"


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    api_key_env: str | None = None
    response_format: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False
    temperature: float | None = None
    max_tokens: int | None = None


class AppConfig(BaseModel):
    """Application configuration root."""

    llm_routes: Dict[str, LlmRoute] = Field(default_factory=dict)
    registry: Dict[str, str] = Field(default_factory=dict)


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, key: str) -> Optional[LlmRoute]:
    """Return the route bound to ``key`` or ``None`` when the task is unrouted."""

    route_id = cfg.registry.get(key)
    if route_id is None:
        return None
    route = cfg.llm_routes.get(route_id)
    if route is None:
        logger.warning("Route '%s' missing for '%s'", route_id, key)
    return route


def load_routes(path: Path) -> AppConfig:
    """Load the config, treating a missing or invalid file as "no models"."""

    try:
        return load_config(path)
    except FileNotFoundError:
        logger.info("No LLM config at %s; every model step will use its fallback", path)
    except (OSError, ValidationError) as exc:
        logger.warning("Failed to load LLM config %s: %s", path, exc)
    return AppConfig()
