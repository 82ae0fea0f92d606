"""Pure read-side views over transaction lists."""

from finanai.views.loans import group_loans, loan_stats
from finanai.views.receivables import (
    FilterCriteria,
    build_notifications,
    filter_items,
    group_by_source_entity,
    personal_wallet_stats,
    receivable_stats,
)
from finanai.views.status import display_status, with_display_status
from finanai.views.summary import financial_summary

__all__ = [
    "FilterCriteria",
    "build_notifications",
    "display_status",
    "filter_items",
    "financial_summary",
    "group_by_source_entity",
    "group_loans",
    "loan_stats",
    "personal_wallet_stats",
    "receivable_stats",
    "with_display_status",
]
