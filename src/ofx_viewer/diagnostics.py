"""Structured diagnostics collected while decoding a document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterator

LOGGER = logging.getLogger(__name__)


class Severity(str, Enum):
    """Severity of a single diagnostic entry."""

    DEBUG = 'debug'
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    @property
    def log_level(self) -> int:
        return _LOG_LEVELS[self]


_LOG_LEVELS: dict[Severity, int] = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A tolerated problem noticed by one of the decode stages."""

    severity: Severity
    stage: str
    message: str
    field: str | None = None

    def __str__(self) -> str:
        location = f' ({self.field})' if self.field else ''
        return f'[{self.stage}] {self.message}{location}'


@dataclass(slots=True)
class Diagnostics:
    """Collector threaded through the decode stages.

    Entries are kept in emission order and mirrored to the ``ofx_viewer.diagnostics``
    logger so command-line runs still see them.
    """

    entries: list[Diagnostic] = field(default_factory=list)
    logger: logging.Logger = field(default=LOGGER, repr=False)

    def add(self, severity: Severity, stage: str, message: str, *, field: str | None = None) -> Diagnostic:
        entry = Diagnostic(severity=severity, stage=stage, message=message, field=field)
        self.entries.append(entry)
        self.logger.log(severity.log_level, '%s', entry)
        return entry

    def debug(self, stage: str, message: str, *, field: str | None = None) -> Diagnostic:
        return self.add(Severity.DEBUG, stage, message, field=field)

    def info(self, stage: str, message: str, *, field: str | None = None) -> Diagnostic:
        return self.add(Severity.INFO, stage, message, field=field)

    def warning(self, stage: str, message: str, *, field: str | None = None) -> Diagnostic:
        return self.add(Severity.WARNING, stage, message, field=field)

    def error(self, stage: str, message: str, *, field: str | None = None) -> Diagnostic:
        return self.add(Severity.ERROR, stage, message, field=field)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def for_stage(self, stage: str) -> list[Diagnostic]:
        """Return the entries emitted by ``stage``."""

        return [entry for entry in self.entries if entry.stage == stage]

    def for_field(self, path: str) -> list[Diagnostic]:
        """Return the entries attached to the document field at ``path``."""

        return [entry for entry in self.entries if entry.field == path]

    def problems(self) -> list[Diagnostic]:
        """Return warning and error entries only."""

        return [entry for entry in self.entries if entry.severity in {Severity.WARNING, Severity.ERROR}]

    def messages(self) -> list[str]:
        return [str(entry) for entry in self.entries]
