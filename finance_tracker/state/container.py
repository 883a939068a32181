"""
Finance State Container

The store is the single owner of the tracker's four entities:
transactions, monthly budget, categories and currency. Callers read
them through read-only properties and change them only through the
operations below.

DESIGN DECISION: Persistence is an explicit step of every operation.
Each operation builds the new value, writes the keys it touches, and
only then swaps the value into memory and notifies subscribers. A
reader can therefore never observe an in-memory value that has not
been handed to the durable store. A failed write leaves memory
unchanged and puts back any keys the same operation already wrote.

All operations run behind one re-entrant lock, so concurrent callers
are serialized even though the expected use is a single thread.
"""

import threading
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, TypeAdapter

from finance_tracker import aggregates
from finance_tracker.audit import AuditLogger
from finance_tracker.config import TrackerSettings, get_settings
from finance_tracker.models import (
    StateEvent,
    StateEventBuilder,
    Transaction,
    TransactionDraft,
    clean_category_name,
    parse_draft,
    parse_transaction,
)
from finance_tracker.services.storage import (
    KeyValueStoreInterface,
    StateDecodeError,
    StorageError,
)
from finance_tracker.state import codec


TRANSACTIONS = "transactions"
BUDGET = "budget"
CATEGORIES = "categories"
CURRENCY = "currency"

ENTITY_NAMES = (TRANSACTIONS, BUDGET, CATEGORIES, CURRENCY)

Listener = Callable[[StateEvent], None]

_AMOUNT = TypeAdapter(Decimal)


class FinanceStore:
    """
    Reactive state container with durable persistence.

    Construct one per composition root; tests build as many isolated
    instances as they like over an InMemoryKeyValueStore.
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        settings: Optional[TrackerSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the store from durable storage.

        Args:
            storage: Backend the four entities are read from and written to
            settings: Defaults and error policies. Uses get_settings() if None.
            audit_logger: Sink for state events. A local one is made if None.
            clock: Source of "now" for ids and default dates.

        Raises:
            StateDecodeError: A persisted value is corrupt and the decode
                failure policy is "fail"
        """
        self._storage = storage
        self._settings = settings or get_settings()
        self._audit = audit_logger or AuditLogger()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

        self._transactions: list[Transaction] = []
        self._budget: Decimal = self._settings.default_budget
        self._categories: list[str] = list(self._settings.default_categories)
        self._currency: str = self._settings.default_currency
        self._last_id = 0

        self._load()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _key(self, entity: str) -> str:
        return self._settings.storage_key(entity)

    @property
    def owned_keys(self) -> list[str]:
        """Durable keys this store reads and writes."""
        return [self._key(name) for name in ENTITY_NAMES]

    def _restore(self, entity: str, decoder: Callable[[str, str], Any]) -> tuple[Any, bool]:
        """
        Decode one persisted entity.

        Returns (value, True) if a value was restored, (None, False) if the
        key is absent or the corrupt value was dropped under the fallback policy.
        """
        key = self._key(entity)
        try:
            raw = self._storage.read(key)
            if raw is None:
                return None, False
            return decoder(key, raw), True
        except StateDecodeError as e:
            if self._settings.decode_failure_policy == "fail":
                self._audit.log_error(
                    error_type="state_decode_failed",
                    error_message=str(e),
                    details={"key": e.key},
                )
                raise
            self._audit.log(StateEventBuilder.decode_fallback(key, str(e)))
            return None, False

    def _load(self) -> None:
        restored = []

        transactions, found = self._restore(TRANSACTIONS, codec.decode_transactions)
        if found:
            self._transactions = transactions
            restored.append(self._key(TRANSACTIONS))

        budget, found = self._restore(BUDGET, codec.decode_budget)
        if found:
            self._budget = budget
            restored.append(self._key(BUDGET))

        categories, found = self._restore(CATEGORIES, codec.decode_categories)
        if found:
            self._categories = categories
            restored.append(self._key(CATEGORIES))

        currency, found = self._restore(CURRENCY, codec.decode_currency)
        if found:
            self._currency = currency
            restored.append(self._key(CURRENCY))

        self._last_id = max((t.id for t in self._transactions), default=0)
        self._audit.log(StateEventBuilder.state_loaded(self.owned_keys, restored))

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._transactions)

    @property
    def monthly_budget(self) -> Decimal:
        with self._lock:
            return self._budget

    @property
    def categories(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._categories)

    @property
    def currency(self) -> str:
        with self._lock:
            return self._currency

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        with self._lock:
            for t in self._transactions:
                if t.id == transaction_id:
                    return t
            return None

    # -------------------------------------------------------------------------
    # Derived aggregates (recomputed on every read)
    # -------------------------------------------------------------------------

    @property
    def total_balance(self) -> Decimal:
        return aggregates.total_balance(self.transactions)

    @property
    def total_expenses(self) -> Decimal:
        return aggregates.total_expenses(self.transactions)

    @property
    def is_over_budget(self) -> bool:
        with self._lock:
            return aggregates.is_over_budget(self._transactions, self._budget)

    def summary(self) -> aggregates.BudgetSummary:
        with self._lock:
            return aggregates.summarize(self._transactions, self._budget)

    def dangling_transactions(self) -> list[Transaction]:
        """Transactions still tagged with a category that was deleted."""
        with self._lock:
            return aggregates.dangling_transactions(self._transactions, self._categories)

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Call `listener` with the StateEvent of every later mutation."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _emit(self, event: StateEvent) -> None:
        self._audit.log(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # The change is already durable; a broken observer must not undo that
                self._audit.log_error(
                    error_type="listener_failed",
                    error_message=str(e),
                    details={
                        "event_id": str(event.event_id),
                        "event_type": event.event_type.value,
                        "listener": getattr(listener, "__qualname__", repr(listener)),
                    },
                )

    # -------------------------------------------------------------------------
    # Persistence step
    # -------------------------------------------------------------------------

    def _commit(
        self,
        transactions: Optional[list[Transaction]] = None,
        budget: Optional[Decimal] = None,
        categories: Optional[list[str]] = None,
        currency: Optional[str] = None,
    ) -> list[str]:
        """
        Write the given new values, then install them in memory.

        If any write fails, keys already written in this commit are put
        back to their previous values and memory is left untouched.

        Returns the durable keys written.
        """
        writes = []
        if transactions is not None:
            writes.append((self._key(TRANSACTIONS), codec.encode_transactions(transactions)))
        if budget is not None:
            writes.append((self._key(BUDGET), codec.encode_budget(budget)))
        if categories is not None:
            writes.append((self._key(CATEGORIES), codec.encode_categories(categories)))
        if currency is not None:
            writes.append((self._key(CURRENCY), codec.encode_currency(currency)))

        previous = {key: self._read_previous(key) for key, _ in writes}
        written: list[str] = []
        for key, value in writes:
            try:
                self._storage.write(key, value)
            except StorageError as e:
                self._audit.log(StateEventBuilder.storage_write_failed(key, str(e)))
                self._roll_back(written, previous)
                raise
            written.append(key)

        if transactions is not None:
            self._transactions = transactions
        if budget is not None:
            self._budget = budget
        if categories is not None:
            self._categories = categories
        if currency is not None:
            self._currency = currency

        return [key for key, _ in writes]

    def _read_previous(self, key: str) -> Optional[str]:
        try:
            return self._storage.read(key)
        except StateDecodeError:
            # Corrupt backing document already dropped under the fallback policy
            return None

    def _roll_back(self, written: list[str], previous: dict[str, Optional[str]]) -> None:
        """Put keys written earlier in a failed commit back to their old values."""
        for key in written:
            try:
                if previous[key] is None:
                    self._storage.delete(key)
                else:
                    self._storage.write(key, previous[key])
            except StorageError as e:
                self._audit.log_error(
                    error_type="rollback_failed",
                    error_message=str(e),
                    details={"key": key, "memory_and_storage_diverged": True},
                )

    def _next_id(self) -> int:
        # Millisecond clock, bumped past the last id so ids never repeat
        candidate = int(self._clock().timestamp() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    # -------------------------------------------------------------------------
    # Transaction operations
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        candidate: Union[TransactionDraft, Mapping, BaseModel],
    ) -> Transaction:
        """
        Validate a candidate, give it an id and a date, and append it.

        The candidate's own date is kept if it has one; otherwise the
        transaction is dated now. Any id on the candidate is ignored.

        Raises:
            InvalidTransactionError: missing amount, missing type,
                unrecognized type, or another malformed field
        """
        draft = parse_draft(candidate)
        with self._lock:
            transaction = Transaction.from_draft(
                draft,
                transaction_id=self._next_id(),
                created_at=self._clock(),
            )
            keys = self._commit(transactions=self._transactions + [transaction])
            self._emit(StateEventBuilder.transaction_added(
                transaction_id=transaction.id,
                amount=str(transaction.amount),
                transaction_type=transaction.type.value,
                keys=keys,
            ))
            return transaction

    def edit_transaction(self, updated: Union[Transaction, Mapping, BaseModel]) -> bool:
        """
        Replace the transaction with the same id wholesale.

        Returns False (and writes nothing) if no transaction has that id.
        """
        transaction = parse_transaction(updated)
        with self._lock:
            for index, existing in enumerate(self._transactions):
                if existing.id == transaction.id:
                    break
            else:
                return False

            replaced = list(self._transactions)
            replaced[index] = transaction
            keys = self._commit(transactions=replaced)
            self._emit(StateEventBuilder.transaction_edited(transaction.id, keys))
            return True

    def remove_transaction(self, transaction_id: int) -> bool:
        """
        Remove every transaction with this id.

        Returns False (and writes nothing) if none matched.
        """
        with self._lock:
            kept = [t for t in self._transactions if t.id != transaction_id]
            removed = len(self._transactions) - len(kept)
            if not removed:
                return False
            keys = self._commit(transactions=kept)
            self._emit(StateEventBuilder.transaction_removed(transaction_id, removed, keys))
            return True

    # -------------------------------------------------------------------------
    # Settings operations
    # -------------------------------------------------------------------------

    def set_budget(self, amount: Union[Decimal, int, float, str]) -> Decimal:
        """
        Replace the monthly budget. No bounds are enforced.

        Raises:
            pydantic.ValidationError: if the amount is not a finite number
        """
        budget = _AMOUNT.validate_python(amount)
        with self._lock:
            keys = self._commit(budget=budget)
            self._emit(StateEventBuilder.budget_set(str(budget), keys))
            return budget

    def set_currency(self, currency: str) -> str:
        """
        Replace the display currency label.

        Raises:
            ValueError: if the code is empty or blank
        """
        code = currency.strip() if isinstance(currency, str) else ""
        if not code:
            raise ValueError("Currency code cannot be empty")
        with self._lock:
            keys = self._commit(currency=code)
            self._emit(StateEventBuilder.currency_set(code, keys))
            return code

    # -------------------------------------------------------------------------
    # Category operations
    # -------------------------------------------------------------------------

    def add_category(self, name: str) -> bool:
        """
        Add a category. Adding one that already exists is a no-op.

        Raises:
            InvalidCategoryError: if the name is empty or blank
        """
        name = clean_category_name(name)
        with self._lock:
            if name in self._categories:
                return False
            keys = self._commit(categories=self._categories + [name])
            self._emit(StateEventBuilder.category_added(name, keys))
            return True

    def delete_category(self, name: str) -> bool:
        """
        Remove a category from the set.

        Transactions tagged with it keep the label; see
        dangling_transactions(). Unknown names are a no-op.
        """
        name = name.strip() if isinstance(name, str) else name
        with self._lock:
            if name not in self._categories:
                return False
            keys = self._commit(categories=[c for c in self._categories if c != name])
            dangling = sum(1 for t in self._transactions if t.category == name)
            self._emit(StateEventBuilder.category_deleted(name, dangling, keys))
            return True

    def update_category(self, old_name: str, new_name: str) -> bool:
        """
        Rename a category in place and relabel its transactions.

        If `new_name` is already a category, the two are merged: `old_name`
        drops out of the set and its transactions take the existing label.
        Unknown `old_name` is a no-op.

        Raises:
            InvalidCategoryError: if old_name exists and new_name is empty or blank
        """
        old_name = old_name.strip() if isinstance(old_name, str) else old_name
        with self._lock:
            if old_name not in self._categories:
                return False
            new_name = clean_category_name(new_name)
            if new_name == old_name:
                return False

            if new_name in self._categories:
                categories = [c for c in self._categories if c != old_name]
            else:
                categories = [new_name if c == old_name else c for c in self._categories]

            relabelled = 0
            transactions = []
            for t in self._transactions:
                if t.category == old_name:
                    t = t.with_category(new_name)
                    relabelled += 1
                transactions.append(t)

            keys = self._commit(transactions=transactions, categories=categories)
            self._emit(StateEventBuilder.category_renamed(old_name, new_name, relabelled, keys))
            return True

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset_app(self) -> None:
        """
        Restore every entity to its default and clear durable storage.

        Only this store's keys are removed unless the
        reset_clears_entire_store setting is on, in which case the whole
        backend is wiped. Defaults are not written back, so a fresh store
        over the same backend starts from defaults too.
        """
        entire = self._settings.reset_clears_entire_store
        with self._lock:
            if entire:
                self._storage.clear_all()
            else:
                for key in self.owned_keys:
                    self._storage.delete(key)

            self._transactions = []
            self._budget = self._settings.default_budget
            self._categories = list(self._settings.default_categories)
            self._currency = self._settings.default_currency

            self._emit(StateEventBuilder.app_reset(self.owned_keys, entire))
