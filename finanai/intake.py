"""Normalization of loosely-typed entries (forms, AI extraction) into transactions."""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil import parser as date_parser

from finanai.exceptions import ValidationError
from finanai.models.company import Category, Company
from finanai.models.enums import CostType, TransactionScope, TransactionStatus, TransactionType
from finanai.models.transaction import Transaction

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Outros"
DEFAULT_DESCRIPTION = "Transação Importada"

_NON_NUMERIC = re.compile(r"[^\d.,-]")


def parse_amount(value: Any) -> Decimal:
    """Parse an amount written as a number or a localized string.

    Accepts ``1234.5``, ``"R$ 1.234,56"``, ``"1,234.56"`` and ``"12,5"``.

    Raises
    ------
    ValidationError
        If the value is not numeric.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    else:
        clean = _NON_NUMERIC.sub("", str(value))
        if "," in clean and "." not in clean:
            clean = clean.replace(",", ".")
        elif "," in clean and "." in clean:
            if clean.rfind(",") > clean.rfind("."):
                clean = clean.replace(".", "").replace(",", ".")
            else:
                clean = clean.replace(",", "")
        try:
            parsed = Decimal(clean)
        except InvalidOperation as e:
            raise ValidationError(f"Invalid amount: {value!r}") from e

    if not parsed.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return parsed


def parse_entry_date(value: Any, default: date) -> date:
    """Parse a date in ISO or day-first format, falling back to ``default``."""
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return default
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass
    try:
        return date_parser.parse(value, dayfirst=True).date()
    except (ValueError, OverflowError):
        logger.debug("Unparseable date %r, using %s", value, default)
        return default


def resolve_category(
    raw: dict[str, Any], categories: list[Category]
) -> tuple[str | None, str]:
    """Resolve ``(category_id, category_name)`` by id first, then by name."""
    wanted_id = raw.get("category_id")
    wanted_name = (raw.get("category") or "").strip()

    match = next((c for c in categories if wanted_id and c.id == wanted_id), None)
    if match is None and wanted_name:
        match = next((c for c in categories if c.name.lower() == wanted_name.lower()), None)

    if match is not None:
        return match.id, match.name
    return None, wanted_name or DEFAULT_CATEGORY


def normalize_entry(
    raw: dict[str, Any],
    *,
    company_id: str,
    today: date,
    user_id: str | None = None,
    categories: list[Category] | None = None,
    companies: list[Company] | None = None,
) -> Transaction:
    """Turn a loose entry dict into a validated ``Transaction``.

    ``raw["company_id"]`` only overrides ``company_id`` when it names one of
    ``companies`` (the companies the user may book for).
    """
    allowed = {c.id for c in companies or []}
    target_company = raw.get("company_id") if raw.get("company_id") in allowed else company_id

    booked = parse_entry_date(raw.get("date"), today)
    due = parse_entry_date(raw.get("due_date"), booked)
    category_id, category = resolve_category(raw, categories or [])

    try:
        tx_type = TransactionType(str(raw.get("type") or "EXPENSE").upper())
        status = TransactionStatus(str(raw.get("status") or "PAID").upper())
        cost_type = CostType(str(raw.get("cost_type") or raw.get("costType") or "VARIABLE").upper())
        scope = TransactionScope(str(raw.get("scope") or "BUSINESS").upper())
    except ValueError as e:
        raise ValidationError(str(e)) from e

    return Transaction(
        company_id=target_company,
        user_id=user_id,
        category_id=category_id,
        category=category,
        description=str(raw.get("description") or DEFAULT_DESCRIPTION),
        amount=abs(parse_amount(raw.get("amount"))),
        type=tx_type,
        status=status,
        cost_type=cost_type,
        scope=scope,
        date=booked,
        due_date=due,
        is_recurring=bool(raw.get("is_recurring")),
        installment_current=_optional_int(raw.get("installment_current")),
        installment_total=_optional_int(raw.get("installment_total")),
    )


def _optional_int(value: Any) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None
