"""Description conventions shared by projection, settlement and grouping.

Installment records carry an ``(i/N)`` suffix, settled records a
``(Pago Parcial)`` tag and remainder records a ``(Restante)`` tag.
"""

import re

PARTIAL_PAID_TAG = "(Pago Parcial)"
REMAINDER_TAG = "(Restante)"

_INSTALLMENT_SUFFIX = re.compile(r"\s*\(\d+/\d+\)")
_SETTLEMENT_TAGS = re.compile(r"\s*\((?:Restante|Pago Parcial|Parcial)\)", re.IGNORECASE)


def strip_installment_suffix(description: str | None) -> str:
    """Remove every ``(i/N)`` suffix, e.g. ``"Notebook (3/10)"`` -> ``"Notebook"``."""
    return _INSTALLMENT_SUFFIX.sub("", description or "").strip()


def installment_description(base: str, index: int, total: int) -> str:
    """Build the description of installment ``index`` of ``total``."""
    return f"{base} ({index}/{total})"


def strip_settlement_tags(description: str | None) -> str:
    """Remove partial-settlement tags added by previous payments."""
    return _SETTLEMENT_TAGS.sub("", description or "").strip()


def tag(description: str, marker: str) -> str:
    """Append a settlement marker to a cleaned description."""
    return f"{strip_settlement_tags(description)} {marker}"
