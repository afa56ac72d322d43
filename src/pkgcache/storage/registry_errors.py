"""Classification of npm CLI failures.

The npm CLI only reports *why* an install or publish failed through its
stderr text, so these helpers match known markers and nothing else:

``ETARGET``
    ``npm install`` found the package but no version matching
    ``0.0.0-<hash>``. The entry was never published: a cache miss.

``E403`` / ``403 Forbidden`` / ``EPUBLISHCONFLICT``
    ``npm publish`` was refused because the version already exists
    (npm reports the ``403 Forbidden`` reply as ``E403``; registries that
    answer ``409`` show up as ``EPUBLISHCONFLICT``). Another producer won the
    race. Bare digits are not matched: npm echoes ``0.0.0-<hash>`` in its
    messages and a hash may contain ``403``.

Everything else is fatal. Keep call sites on these functions so a different
registry CLI only needs new markers here.
"""

from __future__ import annotations

from typing import Literal

InstallOutcome = Literal["miss", "fatal"]
PublishOutcome = Literal["conflict", "fatal"]

INSTALL_MISS_MARKERS: tuple[str, ...] = ("ETARGET",)
PUBLISH_CONFLICT_MARKERS: tuple[str, ...] = ("E403", "403 Forbidden", "EPUBLISHCONFLICT")


def classify_install_failure(stderr: str) -> InstallOutcome:
    if any(marker in stderr for marker in INSTALL_MISS_MARKERS):
        return "miss"
    return "fatal"


def classify_publish_failure(stderr: str) -> PublishOutcome:
    if any(marker in stderr for marker in PUBLISH_CONFLICT_MARKERS):
        return "conflict"
    return "fatal"
