"""Cache provider configuration."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, cast

from pkgcache.errors import ConfigError

CacheProvider = Literal["npm", "local"]

PROVIDER_ENV = "PKGCACHE_CACHE_PROVIDER"
PROVIDER_OPTIONS_ENV = "PKGCACHE_CACHE_PROVIDER_OPTIONS"

_PROVIDERS: tuple[CacheProvider, ...] = ("npm", "local")


@dataclass(frozen=True, slots=True)
class NpmCacheStorageOptions:
    npm_package_name: str
    registry_url: str
    npmrc_userconfig: str | None = None
    npm_executable: str = "npm"

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> NpmCacheStorageOptions:
        """Build options from camelCase or snake_case keys."""
        name = _lookup(payload, "npmPackageName", "npm_package_name")
        registry = _lookup(payload, "registryUrl", "registry_url")
        userconfig = _lookup(payload, "npmrcUserconfig", "npmrc_userconfig")
        executable = _lookup(payload, "npmExecutable", "npm_executable")
        if not isinstance(name, str) or not name:
            raise ConfigError(
                "npm cache options require a package name.",
                hint="Set `npmPackageName` in the provider options.",
                context={"operation": "config"},
            )
        if not isinstance(registry, str) or not registry:
            raise ConfigError(
                "npm cache options require a registry URL.",
                hint="Set `registryUrl` in the provider options.",
                context={"operation": "config", "package": name},
            )
        if userconfig is not None and not isinstance(userconfig, str):
            raise ConfigError(
                "Invalid `npmrcUserconfig` value.",
                context={"operation": "config", "package": name},
            )
        if executable is not None and (not isinstance(executable, str) or not executable):
            raise ConfigError(
                "Invalid `npmExecutable` value.",
                context={"operation": "config", "package": name},
            )
        return cls(
            npm_package_name=name,
            registry_url=registry,
            npmrc_userconfig=userconfig or None,
            npm_executable=executable or "npm",
        )


@dataclass(frozen=True, slots=True)
class CacheStorageConfig:
    provider: CacheProvider = "local"
    options: NpmCacheStorageOptions | None = None


def cache_config_from_env(environ: Mapping[str, str] | None = None) -> CacheStorageConfig:
    """Read the provider name and its JSON options from the environment."""
    env = os.environ if environ is None else environ
    provider = env.get(PROVIDER_ENV, "local").strip() or "local"
    if provider not in _PROVIDERS:
        raise ConfigError(
            f"Unsupported cache provider: {provider}",
            hint=f"Set {PROVIDER_ENV} to one of: {', '.join(_PROVIDERS)}.",
            context={"operation": "config", "provider": provider},
        )

    raw_options = env.get(PROVIDER_OPTIONS_ENV)
    if provider == "local" or not raw_options:
        return CacheStorageConfig(provider=cast(CacheProvider, provider))

    try:
        parsed = json.loads(raw_options)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            "Cache provider options are not valid JSON.",
            hint=str(exc),
            context={"operation": "config", "variable": PROVIDER_OPTIONS_ENV},
        ) from exc
    if not isinstance(parsed, dict):
        raise ConfigError(
            "Cache provider options must be a JSON object.",
            context={"operation": "config", "variable": PROVIDER_OPTIONS_ENV},
        )
    return CacheStorageConfig(
        provider=cast(CacheProvider, provider),
        options=NpmCacheStorageOptions.from_mapping(parsed),
    )


def _lookup(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None
