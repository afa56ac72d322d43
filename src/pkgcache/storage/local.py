"""Cache storage kept in a folder on the local filesystem."""

from __future__ import annotations

from pathlib import Path

from pkgcache.observability import StructuredLogger
from pkgcache.storage.base import CacheStorage
from pkgcache.storage.files import copy_files, list_files, resolve_output_glob


class LocalCacheStorage(CacheStorage):
    def __init__(
        self,
        internal_cache_folder: str | Path,
        logger: StructuredLogger,
        cwd: str | Path,
    ) -> None:
        super().__init__(logger, cwd)
        self.internal_cache_folder = Path(internal_cache_folder)

    def entry_dir(self, hash: str) -> Path:
        return self.cwd / self.internal_cache_folder / hash

    def _fetch(self, hash: str) -> bool:
        entry = self.entry_dir(hash)
        if not entry.is_dir():
            return False
        copy_files(list_files(entry), source=entry, destination=self.cwd)
        return True

    def _put(self, hash: str, output_glob: list[str]) -> None:
        files = resolve_output_glob(
            self.cwd,
            output_glob,
            ignore=(self.cwd / self.internal_cache_folder,),
        )
        copy_files(files, source=self.cwd, destination=self.entry_dir(hash))
