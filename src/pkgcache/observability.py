"""Structured logging and observability helpers."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, TextIO

import cbor2


@dataclass(slots=True)
class StructuredLogger:
    """Collects cache records and metrics; optionally echoes them to ``stream``."""

    records: list[dict[str, Any]] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)
    stream: TextIO | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def log(
        self,
        *,
        operation: str,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        with self._lock:
            self.records.append(record)
            if self.stream is not None:
                self.stream.write(f"[{level}] {operation}: {message}\n")
                self.stream.flush()

    def records_for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("operation") == operation]

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """Store the wall-clock duration of the block in ``metrics[name]`` (seconds)."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.metrics[name] = time.perf_counter() - started

    def set_hit(self, hit: bool) -> None:
        self.metrics["hit"] = hit
        self.log(operation="fetch", message="cache hit" if hit else "cache miss")

    def pipe_process_output(
        self,
        stdout: IO[bytes] | None,
        stderr: IO[bytes] | None,
    ) -> PipedOutput:
        """Forward each line of a running process's output as it arrives.

        One daemon thread drains each stream that is not ``None``. Lines are
        also kept so callers can inspect the text after :meth:`PipedOutput.join`.
        """
        piped = PipedOutput()
        for source, level, captured in (
            (stdout, "info", piped.stdout_lines),
            (stderr, "error", piped.stderr_lines),
        ):
            if source is None:
                continue
            thread = threading.Thread(
                target=self._drain,
                args=(source, level, captured),
                name=f"pkgcache-{level}-pipe",
                daemon=True,
            )
            thread.start()
            piped.threads.append(thread)
        return piped

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        payload = {"records": self.records, "metrics": self.metrics}
        encoded = cbor2.dumps(payload, canonical=True)
        if path is not None:
            output_path = Path(path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(encoded)
        return encoded

    def _drain(self, source: IO[bytes], level: str, captured: list[str]) -> None:
        for raw in iter(source.readline, b""):
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            captured.append(line)
            if line:
                self.log(operation="process_output", message=line, level=level)
        source.close()


@dataclass(slots=True)
class PipedOutput:
    threads: list[threading.Thread] = field(default_factory=list)
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)

    def join(self) -> None:
        for thread in self.threads:
            thread.join()

    @property
    def stdout(self) -> str:
        return "\n".join(self.stdout_lines)

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_lines)
