"""Typed cache error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across cache backends."""

    VALIDATION = "E_VALIDATION"
    CONFIG = "E_CONFIG"
    REGISTRY = "E_REGISTRY"


class PkgCacheError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(PkgCacheError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class ConfigError(PkgCacheError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIG, hint=hint, context=context)


class RegistryError(PkgCacheError):
    """Fatal registry CLI failure; keeps the untruncated stderr for operators."""

    returncode: int
    stderr: str

    def __init__(
        self,
        message: str,
        *,
        returncode: int,
        stderr: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = dict(context or {})
        merged["returncode"] = str(returncode)
        merged["stderr"] = stderr.strip()
        super().__init__(message, code=ErrorCode.REGISTRY, hint=hint, context=merged)
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "ConfigError",
    "ErrorCode",
    "PkgCacheError",
    "RegistryError",
    "ValidationError",
]
