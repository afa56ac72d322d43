from pathlib import Path

import pytest

from pkgcache.config import CacheStorageConfig, NpmCacheStorageOptions
from pkgcache.errors import ConfigError
from pkgcache.observability import StructuredLogger
from pkgcache.process import SubprocessRunner
from pkgcache.storage import (
    CacheStorage,
    LocalCacheStorage,
    NpmCacheStorage,
    get_cache_storage_provider,
)


def test_factory_builds_npm_backend_with_default_runner(tmp_path: Path) -> None:
    options = NpmCacheStorageOptions(npm_package_name="cache", registry_url="https://r.test")
    storage = get_cache_storage_provider(
        CacheStorageConfig(provider="npm", options=options),
        ".cache",
        StructuredLogger(),
        tmp_path,
    )

    assert isinstance(storage, NpmCacheStorage)
    assert isinstance(storage.runner, SubprocessRunner)
    assert storage.options == options
    assert storage.cwd == tmp_path


def test_factory_builds_local_backend(tmp_path: Path) -> None:
    storage = get_cache_storage_provider(
        CacheStorageConfig(provider="local"),
        ".cache",
        StructuredLogger(),
        tmp_path,
    )

    assert isinstance(storage, LocalCacheStorage)
    assert isinstance(storage, CacheStorage)


def test_factory_requires_npm_options(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        get_cache_storage_provider(
            CacheStorageConfig(provider="npm"),
            ".cache",
            StructuredLogger(),
            tmp_path,
        )

    assert excinfo.value.code == "E_CONFIG"


def test_custom_backend_inherits_timing_and_hit_records(tmp_path: Path) -> None:
    class MemoryStorage(CacheStorage):
        def __init__(self, logger: StructuredLogger, cwd: Path) -> None:
            super().__init__(logger, cwd)
            self.entries: dict[str, list[str]] = {}

        def _fetch(self, hash: str) -> bool:
            return hash in self.entries

        def _put(self, hash: str, output_glob: list[str]) -> None:
            self.entries[hash] = output_glob

    logger = StructuredLogger()
    storage = MemoryStorage(logger, tmp_path)

    assert storage.fetch("k1") is False
    storage.put("k1", "dist/**")
    assert storage.fetch("k1") is True

    assert storage.entries == {"k1": ["dist/**"]}
    assert set(logger.metrics) == {"fetch_time", "put_time", "hit"}
    assert [record["message"] for record in logger.records_for_operation("fetch")] == [
        "cache miss",
        "cache hit",
    ]
