"""Cache storage backed by an npm package registry.

Each cache entry is published as ``<npm_package_name>@0.0.0-<hash>``. The
registry never lets a version be overwritten, so the first ``put`` for a hash
wins and later ones are no-ops. Staging trees live under
``<internal_cache_folder>/npm/<hash>``.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

from pkgcache.config import NpmCacheStorageOptions
from pkgcache.errors import RegistryError, ValidationError
from pkgcache.observability import StructuredLogger
from pkgcache.process import CommandRunner, SubprocessRunner
from pkgcache.storage.base import CacheStorage
from pkgcache.storage.files import copy_files, list_files, resolve_output_glob
from pkgcache.storage.registry_errors import classify_install_failure, classify_publish_failure

DESCRIPTOR_NAME = "package.json"


class NpmCacheStorage(CacheStorage):
    def __init__(
        self,
        options: NpmCacheStorageOptions,
        internal_cache_folder: str | Path,
        logger: StructuredLogger,
        cwd: str | Path,
        runner: CommandRunner | None = None,
    ) -> None:
        super().__init__(logger, cwd)
        self.options = options
        self.internal_cache_folder = Path(internal_cache_folder)
        self.runner: CommandRunner = runner if runner is not None else SubprocessRunner()

    def staging_dir(self, hash: str) -> Path:
        return self.cwd / self.internal_cache_folder / "npm" / hash

    def installed_package_dir(self, hash: str) -> Path:
        return self.staging_dir(hash) / "node_modules" / self.options.npm_package_name

    def upload_dir(self, hash: str) -> Path:
        return self.staging_dir(hash) / "upload"

    def package_spec(self, hash: str) -> str:
        return f"{self.options.npm_package_name}@{pseudo_version(hash)}"

    def install_argv(self, hash: str) -> list[str]:
        return [
            self.options.npm_executable,
            "install",
            "--prefix",
            str(self.staging_dir(hash)),
            self.package_spec(hash),
            "--registry",
            self.options.registry_url,
            "--prefer-offline",
            "--ignore-scripts",
            "--no-shrinkwrap",
            "--no-package-lock",
            "--loglevel",
            "error",
            *self._userconfig_args(),
        ]

    def publish_argv(self) -> list[str]:
        return [
            self.options.npm_executable,
            "publish",
            "--registry",
            self.options.registry_url,
            "--loglevel",
            "error",
            *self._userconfig_args(),
        ]

    def _fetch(self, hash: str) -> bool:
        staging = self.staging_dir(hash)
        package_dir = self.installed_package_dir(hash)

        # A previous install of this hash is reused without asking the registry.
        if not package_dir.exists():
            staging.mkdir(parents=True, exist_ok=True)
            self.logger.log(operation="fetch", message=f"installing {self.package_spec(hash)}")
            result = self.runner.run(self.install_argv(hash), logger=self.logger)
            if not result.ok:
                shutil.rmtree(staging, ignore_errors=True)
                if classify_install_failure(result.stderr) == "miss":
                    return False
                raise RegistryError(
                    "npm install of cache entry failed.",
                    returncode=result.returncode,
                    stderr=result.stderr,
                    hint="Check registry URL, credentials and network access.",
                    context={
                        "operation": "fetch",
                        "package": self.package_spec(hash),
                        "command": result.command,
                    },
                )

        files = [rel for rel in list_files(package_dir) if rel != DESCRIPTOR_NAME]
        copy_files(files, source=package_dir, destination=self.cwd)
        return True

    def _put(self, hash: str, output_glob: list[str]) -> None:
        upload = self.upload_dir(hash)
        files = resolve_output_glob(
            self.cwd,
            output_glob,
            ignore=(self.cwd / self.internal_cache_folder,),
        )
        if DESCRIPTOR_NAME in files:
            raise ValidationError(
                "A root-level package.json cannot be cached by the npm backend.",
                hint="The registry package descriptor occupies that path; narrow the output globs.",
                context={"operation": "put", "hash": hash},
            )

        # Leftovers from an earlier failed put would be published too.
        shutil.rmtree(upload, ignore_errors=True)
        upload.mkdir(parents=True)
        descriptor = {"name": self.options.npm_package_name, "version": pseudo_version(hash)}
        (upload / DESCRIPTOR_NAME).write_text(
            json.dumps(descriptor, indent=2) + "\n",
            encoding="utf-8",
        )
        copy_files(files, source=self.cwd, destination=upload)

        self.logger.log(
            operation="put",
            message=f"publishing {self.package_spec(hash)}",
            extra={"files": len(files)},
        )
        result = self.runner.run(
            self.publish_argv(),
            logger=self.logger,
            cwd=upload,
            inherit_stdout=True,
        )
        if result.ok:
            return
        if classify_publish_failure(result.stderr) == "conflict":
            self.logger.log(
                operation="put",
                message=f"{self.package_spec(hash)} already published",
                level="warning",
            )
            return
        raise RegistryError(
            "npm publish of cache entry failed.",
            returncode=result.returncode,
            stderr=result.stderr,
            hint="Check registry URL, credentials and publish permissions.",
            context={
                "operation": "put",
                "package": self.package_spec(hash),
                "command": result.command,
            },
        )

    def _userconfig_args(self) -> list[str]:
        if self.options.npmrc_userconfig:
            return ["--userconfig", self.options.npmrc_userconfig]
        return []


def pseudo_version(hash: str) -> str:
    return f"0.0.0-{hash}"
