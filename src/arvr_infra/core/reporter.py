"""
Structured progress reporting.

The Reporter observes every pipeline boundary and every retry attempt and
emits one line-oriented `key=value` log event for each. It never makes
decisions; the engine's control flow is identical with or without it.

Events are also kept in memory (`Reporter.events`) so the CLI can print
a summary and tests can assert on what happened.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentEvent:
    kind: str
    step: Optional[str] = None
    attempt: Optional[int] = None
    max_attempts: Optional[int] = None
    outcome: Optional[str] = None
    detail: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        parts = [f"event={self.kind}"]
        if self.step is not None:
            parts.append(f'step="{self.step}"')
        if self.attempt is not None:
            parts.append(f"attempt={self.attempt}/{self.max_attempts}")
        if self.outcome is not None:
            parts.append(f"outcome={self.outcome}")
        for key, value in self.fields.items():
            parts.append(f"{key}={value}")
        if self.detail:
            parts.append(f'detail="{self.detail}"')
        return " ".join(parts)


class Reporter:
    def __init__(self):
        self.events: List[DeploymentEvent] = []

    def _emit(self, event: DeploymentEvent, level: int = logging.INFO) -> None:
        self.events.append(event)
        logger.log(level, event.render())

    def of_kind(self, kind: str) -> List[DeploymentEvent]:
        return [e for e in self.events if e.kind == kind]

    # ==========================================
    # Pipeline Boundaries
    # ==========================================

    def pipeline_started(self, step_count: int, mode: str) -> None:
        self._emit(DeploymentEvent("pipeline_started", fields={"steps": step_count, "mode": mode}))

    def validating(self, subscription_id: str) -> None:
        self._emit(DeploymentEvent("validating", fields={"subscription": subscription_id}))

    def validated(self) -> None:
        self._emit(DeploymentEvent("validated", outcome="success"))

    def pipeline_succeeded(self, step_count: int) -> None:
        self._emit(DeploymentEvent("pipeline_finished", outcome="success", fields={"steps": step_count}))

    def pipeline_failed(self, step_name: Optional[str], error: BaseException) -> None:
        self._emit(
            DeploymentEvent("pipeline_finished", step=step_name, outcome="failure", detail=str(error)),
            logging.ERROR,
        )

    # ==========================================
    # Step Boundaries
    # ==========================================

    def step_started(self, step_name: str, index: int, total: int) -> None:
        self._emit(DeploymentEvent("step_started", step=step_name, fields={"index": f"{index}/{total}"}))

    def step_succeeded(self, step_name: str) -> None:
        self._emit(DeploymentEvent("step_finished", step=step_name, outcome="success"))

    def step_failed(self, step_name: str, error: BaseException) -> None:
        self._emit(
            DeploymentEvent("step_finished", step=step_name, outcome="failure", detail=str(error)),
            logging.ERROR,
        )

    def resource_created(self, resource_type: str, name: str) -> None:
        self._emit(DeploymentEvent("resource_ready", outcome="success", fields={"type": resource_type, "name": name}))

    # ==========================================
    # Retry Attempts
    # ==========================================

    def attempt_failed(
        self,
        operation: str,
        attempt: int,
        max_attempts: int,
        error: BaseException,
        fatal: bool = False
    ) -> None:
        self._emit(
            DeploymentEvent(
                "attempt_failed",
                step=operation,
                attempt=attempt,
                max_attempts=max_attempts,
                outcome="fatal" if fatal else "transient" if attempt < max_attempts else "exhausted",
                detail=f"{type(error).__name__}: {error}",
            ),
            logging.WARNING,
        )

    def retry_scheduled(self, operation: str, next_attempt: int, delay_seconds: float) -> None:
        self._emit(
            DeploymentEvent("retry_scheduled", step=operation, fields={"next_attempt": next_attempt, "delay_s": delay_seconds})
        )

    def attempt_recovered(self, operation: str, attempt: int, max_attempts: int) -> None:
        self._emit(DeploymentEvent("attempt_recovered", step=operation, attempt=attempt, max_attempts=max_attempts, outcome="success"))
