"""Backend-agnostic cache storage contract."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from pkgcache.errors import ValidationError
from pkgcache.observability import StructuredLogger

# A semver pre-release identifier list; also a single safe path segment.
HASH_PATTERN = re.compile(r"^[0-9A-Za-z-]+(\.[0-9A-Za-z-]+)*$")
# Numeric pre-release identifiers must not have leading zeros.
LEADING_ZERO_PATTERN = re.compile(r"^0[0-9]+$")


class CacheStorage(ABC):
    """Fetch/put surface shared by every cache backend.

    ``fetch`` returns ``False`` for a missing entry and only raises on real
    failures. ``put`` stores the files matched by the output globs under the
    hash. Backends implement ``_fetch`` and ``_put``; the public methods add
    hash validation, timing and hit/miss records.
    """

    def __init__(self, logger: StructuredLogger, cwd: str | Path) -> None:
        self.logger = logger
        self.cwd = Path(cwd)

    def fetch(self, hash: str) -> bool:
        validate_hash(hash)
        with self.logger.timed("fetch_time"):
            hit = self._fetch(hash)
        self.logger.set_hit(hit)
        return hit

    def put(self, hash: str, output_glob: str | Sequence[str]) -> None:
        validate_hash(hash)
        patterns = [output_glob] if isinstance(output_glob, str) else list(output_glob)
        with self.logger.timed("put_time"):
            self._put(hash, patterns)
        self.logger.log(operation="put", message=f"stored outputs for {hash}")

    @abstractmethod
    def _fetch(self, hash: str) -> bool: ...

    @abstractmethod
    def _put(self, hash: str, output_glob: list[str]) -> None: ...


def validate_hash(hash: str) -> str:
    if (
        not isinstance(hash, str)
        or not HASH_PATTERN.fullmatch(hash)
        or any(LEADING_ZERO_PATTERN.fullmatch(part) for part in hash.split("."))
    ):
        raise ValidationError(
            "Cache hash must be a semver pre-release identifier.",
            hint=(
                "Use alphanumerics and `-`, optionally separated by single dots; "
                "all-digit parts must not start with 0."
            ),
            context={"operation": "validate_hash", "hash": str(hash)},
        )
    return hash
