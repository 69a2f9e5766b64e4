"""Draft cart store.

Holds at most one pending draft per customer and writes the whole map through
to a persistence adapter after every mutation, so drafts survive restarts. The
in-memory map stays authoritative for the session when a write fails.

Persisted blob::

    {"version": 2, "draftOrders": {"<customer id>": {"items": [...], "discountAmount": 0.0}}}
"""
from __future__ import annotations

from typing import Dict, Generic, Iterable, Optional, Type, TypeVar

from pydantic import ValidationError as ModelValidationError

from ..config import get_config
from ..exceptions import SubmissionInProgressError
from ..logging import get_logger
from .migrations import CART_MIGRATIONS, Migration, migrate
from .models import CartDraft, CartLine, QuantityDraft
from .storage import DraftStorage, JsonFileStorage

DraftT = TypeVar("DraftT", CartDraft, QuantityDraft)


class DraftStore(Generic[DraftT]):
    """Single-writer map of customer id -> draft with write-through persistence."""

    version: int
    draft_model: Type[DraftT]
    migrations: Dict[int, Migration] = {}

    def __init__(self, storage: DraftStorage) -> None:
        self.storage = storage
        self.logger = get_logger(__name__)
        self._frozen = False
        self._drafts: Dict[str, DraftT] = self._load()

    # ---------- reads ----------

    @property
    def draft_orders(self) -> Dict[str, DraftT]:
        return dict(self._drafts)

    def get(self, customer_id: str) -> Optional[DraftT]:
        return self._drafts.get(customer_id)

    def __contains__(self, customer_id: str) -> bool:
        return customer_id in self._drafts

    def __len__(self) -> int:
        return len(self._drafts)

    # ---------- writes ----------

    def clear_cart(self, customer_id: str) -> None:
        """Remove one customer's draft; no-op if absent."""
        self._ensure_writable()
        if self._drafts.pop(customer_id, None) is not None:
            self._persist()

    def clear_drafts(self) -> None:
        """Wipe every draft. Called once after a fully successful submission."""
        self._ensure_writable()
        self._drafts = {}
        self._persist()

    # ---------- submission lock ----------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        self._frozen = False

    def _ensure_writable(self) -> None:
        if self._frozen:
            raise SubmissionInProgressError()

    # ---------- persistence ----------

    def to_blob(self) -> dict:
        return {
            "version": self.version,
            "draftOrders": {
                customer_id: draft.model_dump(by_alias=True)
                for customer_id, draft in self._drafts.items()
            },
        }

    def _persist(self) -> None:
        if not self.storage.save(self.to_blob()):
            self.logger.warning("Draft orders were not persisted; keeping them in memory for this session")

    def _is_empty(self, draft: DraftT) -> bool:
        raise NotImplementedError

    def _load(self) -> Dict[str, DraftT]:
        blob = self.storage.load()
        if blob is None:
            return {}
        if not isinstance(blob, dict):
            self.logger.warning("Ignoring persisted drafts: blob is not an object")
            return {}

        version = blob.get("version")
        if isinstance(version, int) and version > self.version:
            self.logger.warning(
                f"Ignoring persisted drafts: schema v{version} is newer than supported v{self.version}"
            )
            return {}
        if version != self.version:
            blob = migrate(blob, self.version, self.migrations)

        raw_drafts = blob.get("draftOrders") or {}
        if not isinstance(raw_drafts, dict):
            self.logger.warning("Ignoring persisted drafts: draftOrders is not an object")
            return {}

        drafts: Dict[str, DraftT] = {}
        for customer_id, raw in raw_drafts.items():
            try:
                draft = self.draft_model.model_validate(raw)
            except ModelValidationError as e:
                self.logger.warning(f"Discarding malformed draft for customer {customer_id}: {e.error_count()} error(s)")
                continue
            if self._is_empty(draft):
                self.logger.warning(f"Discarding empty draft for customer {customer_id}")
                continue
            drafts[str(customer_id)] = draft

        self.logger.info(f"Loaded {len(drafts)} draft order(s) (schema v{self.version})")
        return drafts


class CartDraftStore(DraftStore[CartDraft]):
    """Product-line drafts (schema version 2)."""

    version = 2
    draft_model = CartDraft
    migrations = CART_MIGRATIONS

    @classmethod
    def from_config(cls) -> "CartDraftStore":
        return cls(JsonFileStorage.from_config())

    def set_cart(self, customer_id: str, lines: Iterable[CartLine], discount_amount: float) -> Optional[CartDraft]:
        """Replace the customer's whole draft.

        Lines are stored as given, zero-quantity lines included. A cart whose total
        quantity is 0 removes the draft instead.
        """
        self._ensure_writable()
        draft = CartDraft(items=list(lines), discount_amount=discount_amount)
        if self._is_empty(draft):
            self._drafts.pop(customer_id, None)
            self._persist()
            return None
        self._drafts[customer_id] = draft
        self._persist()
        return draft

    def _is_empty(self, draft: CartDraft) -> bool:
        return sum(line.quantity for line in draft.items) == 0


class QuantityDraftStore(DraftStore[QuantityDraft]):
    """Single quantity/unit price drafts (schema version 1)."""

    version = 1
    draft_model = QuantityDraft

    def __init__(self, storage: DraftStorage, default_unit_price: Optional[float] = None) -> None:
        if default_unit_price is None:
            default_unit_price = get_config().default_unit_price
        self.default_unit_price = default_unit_price
        super().__init__(storage)

    @classmethod
    def from_config(cls) -> "QuantityDraftStore":
        return cls(JsonFileStorage.from_config(suffix="-quantities"))

    def set_quantity(self, customer_id: str, quantity: int) -> Optional[QuantityDraft]:
        """Set the quantity, keeping the unit price (default price on first touch). 0 deletes the draft."""
        self._ensure_writable()
        if quantity == 0:
            self._drafts.pop(customer_id, None)
            self._persist()
            return None
        existing = self._drafts.get(customer_id)
        unit_price = existing.unit_price if existing else self.default_unit_price
        draft = QuantityDraft(quantity=quantity, unit_price=unit_price)
        self._drafts[customer_id] = draft
        self._persist()
        return draft

    def set_unit_price(self, customer_id: str, unit_price: float) -> Optional[QuantityDraft]:
        """Set the unit price, keeping the quantity.

        Only an existing draft is updated: a price set before any quantity is
        dropped, and the draft later starts at the default unit price.
        """
        self._ensure_writable()
        existing = self._drafts.get(customer_id)
        if existing is None:
            # A price with no quantity would be a zero-quantity draft
            self.logger.debug(f"Ignoring unit price for customer {customer_id} without a draft")
            return None
        draft = existing.model_copy(update={"unit_price": unit_price})
        self._drafts[customer_id] = draft
        self._persist()
        return draft

    def _is_empty(self, draft: QuantityDraft) -> bool:
        return draft.quantity == 0
