"""Configuration package for the interview policy engine."""
from .policy import Difficulty, PolicyConfig, PolicyConfigError, build_policy, get_policy, load_policy
from .registry import (
    EVAL_KEY,
    PROFILE_PARSER_KEY,
    QUESTION_KEY,
    ROLE_PARSER_KEY,
    bind_model,
    clear_models,
    get_model,
    unbind_model,
)
from .routes import AppConfig, LlmRoute, load_app_registry, load_config, resolve_registry
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "Difficulty",
    "LlmRoute",
    "PolicyConfig",
    "PolicyConfigError",
    "build_policy",
    "get_policy",
    "load_policy",
    "load_app_registry",
    "load_config",
    "resolve_registry",
    "EVAL_KEY",
    "PROFILE_PARSER_KEY",
    "QUESTION_KEY",
    "ROLE_PARSER_KEY",
    "bind_model",
    "clear_models",
    "get_model",
    "unbind_model",
    "Settings",
    "settings",
]
