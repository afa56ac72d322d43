"""Build-output cache storage backed by an npm package registry."""

from .config import CacheStorageConfig, NpmCacheStorageOptions, cache_config_from_env
from .errors import ConfigError, ErrorCode, PkgCacheError, RegistryError, ValidationError
from .observability import StructuredLogger
from .process import CommandRunner, ProcessResult, SubprocessRunner
from .storage import (
    CacheStorage,
    LocalCacheStorage,
    NpmCacheStorage,
    get_cache_storage_provider,
)

__all__ = [
    "CacheStorage",
    "CacheStorageConfig",
    "CommandRunner",
    "ConfigError",
    "ErrorCode",
    "LocalCacheStorage",
    "NpmCacheStorage",
    "NpmCacheStorageOptions",
    "PkgCacheError",
    "ProcessResult",
    "RegistryError",
    "StructuredLogger",
    "SubprocessRunner",
    "ValidationError",
    "cache_config_from_env",
    "get_cache_storage_provider",
]
