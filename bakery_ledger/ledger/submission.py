"""Batch submission state machine: IDLE -> SUBMITTING -> (SUCCESS | FAILED) -> IDLE.

Per-customer writes are issued one customer at a time and the run stops at the
first failure, so a failed submission leaves some prefix of customers committed
and the rest untouched. Drafts are cleared only when every customer succeeded.
A failed batch is NOT safe to resubmit as-is: customers committed before the
failure would be ordered twice.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..data.interface import LedgerStore
from ..data.models import Customer, StoreError, StoreResponse
from ..drafts.store import DraftStore
from ..exceptions import EmptyBatchError, SubmissionInProgressError
from ..logging import get_logger
from .batch import CustomerSubmission, OrderBatch, build_order_batch
from .saga import Context, Saga

BatchBuilder = Callable[..., OrderBatch]


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class SubmissionResult(BaseModel):
    """Outcome of one submission."""
    state: SubmissionState
    batch_id: str
    customer_count: int = Field(description="Customers in the batch")
    total_items: int
    total_amount: float
    committed_customer_ids: List[str] = Field(default_factory=list, description="Customers whose order and items were written")
    failed_customer_id: Optional[str] = Field(default=None, description="Customer whose write failed first")
    error: Optional[StoreError] = None


class BatchSubmitter:
    """Submits the drafts of a DraftStore to a LedgerStore."""

    def __init__(
        self,
        store: LedgerStore,
        drafts: DraftStore,
        build_batch: BatchBuilder = build_order_batch,
    ) -> None:
        self.store = store
        self.drafts = drafts
        self.build_batch = build_batch
        self.state = SubmissionState.IDLE
        self.last_result: Optional[SubmissionResult] = None
        self.logger = get_logger(__name__)

    @property
    def submitting(self) -> bool:
        return self.state is SubmissionState.SUBMITTING

    def preview(self, customers: Iterable[Customer], batch_id: Optional[str] = None) -> OrderBatch:
        return self.build_batch(customers, self.drafts.draft_orders, batch_id=batch_id)

    def submit(self, customers: Iterable[Customer], batch_id: Optional[str] = None) -> SubmissionResult:
        if self.submitting:
            raise SubmissionInProgressError()

        batch = self.preview(customers, batch_id=batch_id)
        if not batch.submissions:
            raise EmptyBatchError()

        self.logger.info(
            f"Submitting batch {batch.batch_id}: {batch.customer_count} customer(s), "
            f"{batch.total_items} item(s), total {batch.total_amount:.2f}"
        )
        self.state = SubmissionState.SUBMITTING
        self.drafts.freeze()
        try:
            outcome = self._saga(batch).run({"committed": []})
        finally:
            self.drafts.thaw()

        if outcome.ok:
            self.state = SubmissionState.SUCCESS
            self.drafts.clear_drafts()
            self.logger.info(f"Batch {batch.batch_id} committed; drafts cleared")
        else:
            self.state = SubmissionState.FAILED
            self.logger.error(
                f"Batch {batch.batch_id} stopped at customer {outcome.failed_step.key}; "
                f"{len(outcome.context['committed'])} customer(s) already committed, drafts kept"
            )

        result = SubmissionResult(
            state=self.state,
            batch_id=batch.batch_id,
            customer_count=batch.customer_count,
            total_items=batch.total_items,
            total_amount=batch.total_amount,
            committed_customer_ids=list(outcome.context["committed"]),
            failed_customer_id=outcome.failed_step.key if outcome.failed_step else None,
            error=outcome.error,
        )
        self.last_result = result
        self.state = SubmissionState.IDLE
        return result

    def _saga(self, batch: OrderBatch) -> Saga:
        saga = Saga(f"batch {batch.batch_id}")
        for submission in batch.submissions:
            saga.add_step("insert order", self._insert_order(submission), key=submission.customer_id)
            saga.add_step("insert order items", self._insert_items(submission), key=submission.customer_id)
        return saga

    def _insert_order(self, submission: CustomerSubmission) -> Callable[[Context], StoreResponse]:
        def action(context: Context) -> StoreResponse:
            response = self.store.insert_order(submission.order)
            if response.ok:
                context[f"order:{submission.customer_id}"] = response.data.id
            return response
        return action

    def _insert_items(self, submission: CustomerSubmission) -> Callable[[Context], StoreResponse]:
        def action(context: Context) -> StoreResponse:
            if submission.items:
                order_id = context[f"order:{submission.customer_id}"]
                rows = [item.model_copy(update={"order_id": order_id}) for item in submission.items]
                response = self.store.insert_order_items(rows)
                if not response.ok:
                    return response
            context["committed"].append(submission.customer_id)
            return StoreResponse.success()
        return action
