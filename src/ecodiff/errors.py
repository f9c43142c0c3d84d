"""Error hierarchy for ecodiff."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class EcodiffError(Exception):
    """Base exception for ecodiff failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(EcodiffError):
    """Configuration loading or validation error."""


class ValidationError(EcodiffError):
    """Validation error for input tables."""


class AnalysisError(EcodiffError):
    """Analysis resolution or execution error."""


__all__ = [
    "EcodiffError",
    "ConfigError",
    "ValidationError",
    "AnalysisError",
]
