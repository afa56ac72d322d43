"""Shared test fixtures."""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from pkgcache.config import NpmCacheStorageOptions
from pkgcache.observability import StructuredLogger
from pkgcache.process import ProcessResult

ETARGET_STDERR = (
    "npm ERR! code ETARGET\n"
    "npm ERR! notarget No matching version found for {spec}.\n"
)
E403_STDERR = (
    "npm ERR! code E403\n"
    "npm ERR! 403 403 Forbidden - PUT {registry}/{name} - "
    "You cannot publish over the previously published versions: {version}.\n"
)


@dataclass
class FakeRegistry:
    """In-memory npm registry answering the install/publish CLI contract."""

    url: str = "https://registry.example.test"
    packages: dict[str, dict[str, bytes]] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    publish_cwds: list[Path] = field(default_factory=list)
    failure: tuple[int, str] | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def run(
        self,
        argv: Sequence[str],
        *,
        logger: StructuredLogger,
        cwd: Path | None = None,
        inherit_stdout: bool = False,
    ) -> ProcessResult:
        command = tuple(argv)
        with self._lock:
            self.calls.append(command)
        if self.failure is not None:
            returncode, stderr = self.failure
            return ProcessResult(argv=command, returncode=returncode, stderr=stderr)
        if command[1] == "install":
            return self._install(command)
        if command[1] == "publish":
            assert cwd is not None
            assert inherit_stdout is True
            return self._publish(command, cwd)
        raise AssertionError(f"unexpected npm command: {command}")

    def _install(self, command: tuple[str, ...]) -> ProcessResult:
        prefix = Path(command[command.index("--prefix") + 1])
        spec = command[4]
        name, _, _ = spec.rpartition("@")
        with self._lock:
            tree = self.packages.get(spec)
        if tree is None:
            return ProcessResult(
                argv=command,
                returncode=1,
                stderr=ETARGET_STDERR.format(spec=spec),
            )
        package_dir = prefix / "node_modules" / name
        for rel, payload in tree.items():
            target = package_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        return ProcessResult(argv=command, returncode=0, stdout="added 1 package\n")

    def _publish(self, command: tuple[str, ...], cwd: Path) -> ProcessResult:
        descriptor = json.loads((cwd / "package.json").read_text(encoding="utf-8"))
        spec = f"{descriptor['name']}@{descriptor['version']}"
        tree = {
            path.relative_to(cwd).as_posix(): path.read_bytes()
            for path in sorted(cwd.rglob("*"))
            if path.is_file()
        }
        with self._lock:
            self.publish_cwds.append(cwd)
            if spec in self.packages:
                return ProcessResult(
                    argv=command,
                    returncode=1,
                    stderr=E403_STDERR.format(
                        registry=self.url,
                        name=descriptor["name"],
                        version=descriptor["version"],
                    ),
                )
            self.packages[spec] = tree
        return ProcessResult(argv=command, returncode=0, stdout=f"+ {spec}\n")

    def commands(self, verb: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[1] == verb]


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger()


@pytest.fixture
def npm_options(registry: FakeRegistry) -> NpmCacheStorageOptions:
    return NpmCacheStorageOptions(
        npm_package_name="build-cache",
        registry_url=registry.url,
    )
