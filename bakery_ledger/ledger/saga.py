"""Ordered multi-step writes against a backend with no cross-table transaction.

Steps run strictly one after another and the run stops at the first failing
step. A step may declare a compensation; when a later step fails, completed
steps are compensated in reverse order. Steps without one stay committed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..data.models import StoreError, StoreResponse
from ..logging import get_logger

Context = Dict[str, Any]
StepAction = Callable[[Context], StoreResponse]


@dataclass
class SagaStep:
    name: str
    action: StepAction
    compensate: Optional[StepAction] = None
    key: Optional[str] = None  # e.g. the customer the step writes for


@dataclass
class SagaResult:
    completed: List[SagaStep] = field(default_factory=list)
    failed_step: Optional[SagaStep] = None
    error: Optional[StoreError] = None
    compensation_errors: List[StoreError] = field(default_factory=list)
    context: Context = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failed_step is None


class Saga:
    def __init__(self, name: str, steps: Optional[List[SagaStep]] = None) -> None:
        self.name = name
        self.steps: List[SagaStep] = list(steps or [])
        self.logger = get_logger(__name__)

    def add_step(
        self,
        name: str,
        action: StepAction,
        compensate: Optional[StepAction] = None,
        key: Optional[str] = None,
    ) -> "Saga":
        self.steps.append(SagaStep(name=name, action=action, compensate=compensate, key=key))
        return self

    def run(self, context: Optional[Context] = None) -> SagaResult:
        result = SagaResult(context=context if context is not None else {})

        for step in self.steps:
            response = self._call(step.action, step, result.context)
            if not response.ok:
                self.logger.error(f"{self.name}: step '{step.name}' failed: {response.error.message}")
                result.failed_step = step
                result.error = response.error
                self._compensate(result)
                return result
            result.completed.append(step)

        return result

    def _call(self, action: StepAction, step: SagaStep, context: Context) -> StoreResponse:
        try:
            return action(context)
        except Exception as exc:
            # Backend adapters report failures as results; anything raised is unexpected
            self.logger.exception(f"{self.name}: step '{step.name}' raised")
            return StoreResponse.failure(str(exc) or exc.__class__.__name__)

    def _compensate(self, result: SagaResult) -> None:
        for step in reversed(result.completed):
            if step.compensate is None:
                continue
            response = self._call(step.compensate, step, result.context)
            if not response.ok:
                self.logger.error(f"{self.name}: compensation of '{step.name}' failed: {response.error.message}")
                result.compensation_errors.append(response.error)
