"""Tenant-side reference models."""

from dataclasses import asdict, dataclass
from typing import Any

from finanai.models.enums import UserPlan


@dataclass
class Company:
    """Business entity (tenant) owning transactions."""

    id: str
    name: str
    plan: UserPlan = UserPlan.FREE
    cnpj: str | None = None
    owner_id: str | None = None


@dataclass
class Category:
    """Transaction category defined per company."""

    id: str
    company_id: str
    name: str
    color: str = ""
    icon: str = ""

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Category":
        return cls(
            id=str(record["id"]),
            company_id=record["company_id"],
            name=record["name"],
            color=record.get("color") or "",
            icon=record.get("icon") or "",
        )

    def to_record(self) -> dict[str, Any]:
        return asdict(self)
