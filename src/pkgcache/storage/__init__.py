"""Cache storage backends."""

from __future__ import annotations

from pathlib import Path

from pkgcache.config import CacheStorageConfig
from pkgcache.errors import ConfigError
from pkgcache.observability import StructuredLogger
from pkgcache.process import CommandRunner

from .base import CacheStorage, validate_hash
from .local import LocalCacheStorage
from .npm import NpmCacheStorage, pseudo_version


def get_cache_storage_provider(
    config: CacheStorageConfig,
    internal_cache_folder: str | Path,
    logger: StructuredLogger,
    cwd: str | Path,
    *,
    runner: CommandRunner | None = None,
) -> CacheStorage:
    """Instantiate the backend named by ``config.provider``."""
    if config.provider == "npm":
        if config.options is None:
            raise ConfigError(
                "The npm cache provider requires options.",
                hint="Provide npmPackageName and registryUrl.",
                context={"operation": "get_cache_storage_provider", "provider": "npm"},
            )
        return NpmCacheStorage(config.options, internal_cache_folder, logger, cwd, runner=runner)
    if config.provider == "local":
        return LocalCacheStorage(internal_cache_folder, logger, cwd)
    raise ConfigError(
        f"Unsupported cache provider: {config.provider}",
        context={"operation": "get_cache_storage_provider", "provider": str(config.provider)},
    )


__all__ = [
    "CacheStorage",
    "LocalCacheStorage",
    "NpmCacheStorage",
    "get_cache_storage_provider",
    "pseudo_version",
    "validate_hash",
]
