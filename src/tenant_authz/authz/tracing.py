from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Protocol

from tenant_authz.configs.logging_config import get_logger

log = get_logger(__name__)


class DecisionStep(str, Enum):
    PRINCIPAL = "principal"
    ROLE = "role"
    SUPERUSER = "superuser"
    TENANT_BOUNDARY = "tenant_boundary"
    PERMISSION = "permission"
    ACTION = "action"
    SCOPE = "scope"
    DECISION = "decision"


class DecisionTracer(Protocol):
    def record(self, step: DecisionStep, passed: bool, **details: Any) -> None: ...


class NoopTracer:
    def record(self, step: DecisionStep, passed: bool, **details: Any) -> None:
        return None


class LoggingTracer:
    """
    Logs every precedence step of `authorize` for selected modules at DEBUG.

    Only decisions whose `module` detail is in `modules` are written; an empty
    set traces nothing.
    """

    def __init__(self, modules: Iterable[str]):
        self._modules = frozenset(modules)

    def record(self, step: DecisionStep, passed: bool, **details: Any) -> None:
        if details.get("module") not in self._modules or not log.isEnabledFor(logging.DEBUG):
            return
        log.debug(
            "authz.trace step=%s passed=%s %s",
            step.value,
            passed,
            " ".join(f"{k}={v}" for k, v in sorted(details.items())),
        )


class RecordingTracer:
    """Keeps (step, passed, details) tuples in memory; handy in tests and diagnostics."""

    def __init__(self) -> None:
        self.steps: list[tuple[DecisionStep, bool, dict[str, Any]]] = []

    def record(self, step: DecisionStep, passed: bool, **details: Any) -> None:
        self.steps.append((step, passed, details))

    @property
    def names(self) -> list[DecisionStep]:
        return [s for s, _, _ in self.steps]
