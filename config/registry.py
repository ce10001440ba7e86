"""In-memory model registry for external content services."""
from typing import Any, Callable, Dict

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind a callable implementation to a registry key."""
    _REGISTRY[key] = fn


def unbind_model(key: str) -> None:
    _REGISTRY.pop(key, None)


def clear_models() -> None:
    _REGISTRY.clear()


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


PROFILE_PARSER_KEY = "models.profile_parser"
ROLE_PARSER_KEY = "models.role_parser"
QUESTION_KEY = "models.question_generator"
EVAL_KEY = "models.response_evaluator"
