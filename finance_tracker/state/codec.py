"""
Encoding of the four tracker entities to and from stored JSON text.

Every decoder raises StateDecodeError (never a raw pydantic or json
error), so the store has a single failure type to apply its policy to.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import Field, TypeAdapter, ValidationError

from finance_tracker.models.transaction import Money, Transaction
from finance_tracker.services.storage import StateDecodeError


_TRANSACTIONS = TypeAdapter(list[Transaction])
_MONEY = TypeAdapter(Money)
_CATEGORIES = TypeAdapter(list[str])
_CURRENCY = TypeAdapter(Annotated[str, Field(min_length=1)])


def _fail(key: str, raw: str, e: ValidationError) -> StateDecodeError:
    first = e.errors()[0]
    return StateDecodeError(key, raw, f"{first['type']}: {first['msg']}")


def encode_transactions(transactions: list[Transaction]) -> str:
    return _TRANSACTIONS.dump_json(transactions).decode("utf-8")


def decode_transactions(key: str, raw: str) -> list[Transaction]:
    try:
        transactions = _TRANSACTIONS.validate_json(raw)
    except ValidationError as e:
        raise _fail(key, raw, e) from e
    ids = [t.id for t in transactions]
    if len(ids) != len(set(ids)):
        raise StateDecodeError(key, raw, "duplicate transaction ids")
    return transactions


def encode_budget(amount: Decimal) -> str:
    return _MONEY.dump_json(amount).decode("utf-8")


def decode_budget(key: str, raw: str) -> Decimal:
    try:
        return _MONEY.validate_json(raw)
    except ValidationError as e:
        raise _fail(key, raw, e) from e


def encode_categories(categories: list[str]) -> str:
    return _CATEGORIES.dump_json(categories).decode("utf-8")


def decode_categories(key: str, raw: str) -> list[str]:
    try:
        names = _CATEGORIES.validate_json(raw)
    except ValidationError as e:
        raise _fail(key, raw, e) from e
    # Set semantics: keep the first occurrence of each label
    return list(dict.fromkeys(names))


def encode_currency(currency: str) -> str:
    return _CURRENCY.dump_json(currency).decode("utf-8")


def decode_currency(key: str, raw: str) -> str:
    try:
        return _CURRENCY.validate_json(raw)
    except ValidationError as e:
        raise _fail(key, raw, e) from e
