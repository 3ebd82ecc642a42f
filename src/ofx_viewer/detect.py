"""Input discovery helpers for the OFX viewer."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ofx_viewer.models import ProcessingJob

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable, Iterator

OFX_SUFFIXES: frozenset[str] = frozenset({'.ofx', '.qfx'})
"""File suffixes treated as OFX statements."""


def is_ofx_file(path: Path) -> bool:
    """Return ``True`` if ``path`` has an OFX statement suffix."""

    return path.suffix.lower() in OFX_SUFFIXES


def iter_jobs(target: str) -> Iterator[ProcessingJob]:
    """Yield ``ProcessingJob`` entries for ``target`` (URL, file or directory)."""

    if target.lower().startswith(('http://', 'https://')):
        yield ProcessingJob(source=target)
        return

    expanded = Path(target).expanduser()
    if expanded.is_file():
        if not is_ofx_file(expanded):
            raise ValueError(f'Unsupported input format: {expanded.suffix}')
        yield ProcessingJob(source=str(expanded))
        return

    if not expanded.is_dir():
        raise FileNotFoundError(f'Input path not found: {expanded}')

    for entry in sorted(expanded.iterdir()):
        if entry.is_file() and is_ofx_file(entry):
            yield ProcessingJob(source=str(entry))


def gather_jobs(targets: Iterable[str]) -> list[ProcessingJob]:
    """Collect processing jobs for all provided ``targets``."""

    jobs: list[ProcessingJob] = []
    for target in targets:
        jobs.extend(iter_jobs(target))
    return jobs
