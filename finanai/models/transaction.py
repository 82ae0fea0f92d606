"""Transaction model and recurrence modes."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from finanai.exceptions import ValidationError
from finanai.models.description import strip_installment_suffix, strip_settlement_tags
from finanai.models.enums import CostType, TransactionScope, TransactionStatus, TransactionType

CENT = Decimal("0.01")


@dataclass(frozen=True)
class NoRecurrence:
    """One-off transaction."""


@dataclass(frozen=True)
class FixedInstallments:
    """Installment ``current`` of a fixed ``total`` count."""

    current: int
    total: int


@dataclass(frozen=True)
class OpenEnded:
    """Open-ended monthly recurrence."""


RecurrenceMode = Union[NoRecurrence, FixedInstallments, OpenEnded]


@dataclass
class Transaction:
    """Income or expense booked for a company."""

    company_id: str
    description: str
    amount: Decimal
    type: TransactionType
    status: TransactionStatus
    date: date
    id: str | None = None
    user_id: str | None = None
    due_date: date | None = None
    category_id: str | None = None
    category: str = ""
    cost_type: CostType | None = None
    scope: TransactionScope | None = None
    is_recurring: bool = False
    installment_current: int | None = None
    installment_total: int | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.company_id:
            raise ValidationError("Transaction must belong to a company (company_id missing)")
        if self.amount < 0:
            raise ValidationError(f"Amount must be non-negative, got {self.amount}")
        if (
            self.installment_current is not None
            and self.installment_total is not None
            and self.installment_current > self.installment_total
        ):
            raise ValidationError(
                f"Installment {self.installment_current} exceeds total {self.installment_total}"
            )

    @property
    def effective_due_date(self) -> date:
        """Due date, falling back to the booking date."""
        return self.due_date or self.date

    @property
    def effective_scope(self) -> TransactionScope:
        return self.scope or TransactionScope.BUSINESS

    @property
    def recurrence(self) -> RecurrenceMode:
        """Resolve the recurrence mechanism of this record.

        Fixed installments take precedence over ``is_recurring`` when a
        record carries both.
        """
        if self.installment_total and self.installment_total > 1:
            return FixedInstallments(self.installment_current or 1, self.installment_total)
        if self.is_recurring:
            return OpenEnded()
        return NoRecurrence()

    @property
    def base_description(self) -> str:
        """Description without installment suffix and settlement tags."""
        return strip_settlement_tags(strip_installment_suffix(self.description))

    def series_key(self) -> str:
        """Key of the logical series this record belongs to."""
        if self.installment_total:
            return f"{self.base_description}_inst_{self.installment_total}"
        return f"{strip_settlement_tags(self.description)}_rec"

    def evolve(self, **changes: Any) -> "Transaction":
        """Return a copy with ``changes`` applied (validated again)."""
        return replace(self, **changes)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Transaction":
        """Build a transaction from a raw store row.

        Raises
        ------
        ValidationError
            If a required field is missing or malformed.
        """
        try:
            booked = parse_date(record["date"])
            return cls(
                id=_opt_str(record.get("id")),
                company_id=record["company_id"],
                user_id=_opt_str(record.get("user_id")),
                description=str(record.get("description") or ""),
                amount=parse_decimal(record["amount"]),
                type=TransactionType(record.get("type") or TransactionType.EXPENSE),
                status=TransactionStatus(record.get("status") or TransactionStatus.PAID),
                date=booked,
                due_date=parse_date(record["due_date"]) if record.get("due_date") else None,
                category_id=_opt_str(record.get("category_id")),
                category=record.get("category") or "",
                cost_type=CostType(record["cost_type"]) if record.get("cost_type") else None,
                scope=TransactionScope(record["scope"]) if record.get("scope") else None,
                is_recurring=bool(record.get("is_recurring")),
                installment_current=_opt_int(record.get("installment_current")),
                installment_total=_opt_int(record.get("installment_total")),
                created_at=record.get("created_at"),
            )
        except KeyError as e:
            raise ValidationError(f"Transaction record missing field {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Malformed transaction record: {e}") from e

    def to_record(self) -> dict[str, Any]:
        """Render the store-facing row (``id``/``created_at`` only when set)."""
        record: dict[str, Any] = {
            "company_id": self.company_id,
            "user_id": self.user_id,
            "description": self.description,
            "amount": self.amount,
            "type": self.type.value,
            "status": self.status.value,
            "date": self.date,
            "due_date": self.due_date,
            "category_id": self.category_id,
            "category": self.category,
            "cost_type": self.cost_type.value if self.cost_type else None,
            "scope": self.scope.value if self.scope else None,
            "is_recurring": self.is_recurring,
            "installment_current": self.installment_current,
            "installment_total": self.installment_total,
        }
        if self.id is not None:
            record["id"] = self.id
        if self.created_at is not None:
            record["created_at"] = self.created_at
        return record


def parse_date(value: Any) -> date:
    """Parse a calendar date from a ``date``, ``datetime`` or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Not a date: {value!r}")


def parse_decimal(value: Any) -> Decimal:
    """Parse a monetary value into a ``Decimal``."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not an amount: {value!r}")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not an amount: {value!r}") from e
    if not parsed.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    return parsed


def quantize(value: Decimal) -> Decimal:
    """Round to cents."""
    return value.quantize(CENT)


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _opt_int(value: Any) -> int | None:
    return None if value is None or value == "" else int(value)
