"""Output-file selection and concurrent tree copies."""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

from pkgcache.errors import ValidationError


def resolve_output_glob(
    cwd: Path,
    patterns: Sequence[str],
    *,
    ignore: Sequence[Path] = (),
) -> list[str]:
    """Return the regular files under *cwd* matched by *patterns*.

    Patterns prefixed with ``!`` remove matches. A trailing ``**`` segment
    selects every file beneath its parent. Files below any *ignore* directory
    are never returned. Results are sorted POSIX paths relative to *cwd*.
    """
    included: set[str] = set()
    excluded: set[str] = set()
    for raw in patterns:
        negated = raw.startswith("!")
        pattern = _normalize_pattern(raw[1:] if negated else raw)
        matches = {
            path.relative_to(cwd).as_posix()
            for path in cwd.glob(pattern)
            if path.is_file() and not any(path.is_relative_to(skip) for skip in ignore)
        }
        if negated:
            excluded |= matches
        else:
            included |= matches
    return sorted(included - excluded)


def list_files(root: Path) -> list[str]:
    """Every regular file below *root*, as sorted POSIX relative paths."""
    return sorted(path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file())


def copy_files(files: Iterable[str], *, source: Path, destination: Path) -> None:
    """Copy each relative path from *source* to *destination* concurrently.

    Returns once every copy has finished; the first failure is re-raised.
    """
    pending = list(files)
    if not pending:
        return
    with ThreadPoolExecutor(max_workers=min(32, len(pending))) as pool:
        futures = [
            pool.submit(_copy_one, source / rel, destination / rel) for rel in pending
        ]
        for future in futures:
            future.result()


def _copy_one(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)


def _normalize_pattern(pattern: str) -> str:
    pure = PurePosixPath(pattern)
    if not pattern or pure.is_absolute() or ".." in pure.parts:
        raise ValidationError(
            "Output glob must be a relative pattern inside the working directory.",
            hint="Use patterns such as `dist/**` or `lib/**/*.js`.",
            context={"operation": "resolve_output_glob", "pattern": pattern},
        )
    if pure.name == "**":
        return f"{pure.as_posix()}/*"
    return pattern
