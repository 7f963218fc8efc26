"""Configuration package for the interview practice services."""
from .routes import (
    EVALUATION_KEY,
    NARRATIVE_KEY,
    PROFILE_KEY,
    QUESTIONS_KEY,
    TRANSCRIBE_KEY,
    AppConfig,
    LlmRoute,
    load_config,
    load_routes,
    resolve_route,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "load_routes",
    "resolve_route",
    "PROFILE_KEY",
    "QUESTIONS_KEY",
    "EVALUATION_KEY",
    "NARRATIVE_KEY",
    "TRANSCRIBE_KEY",
    "Settings",
    "settings",
]
