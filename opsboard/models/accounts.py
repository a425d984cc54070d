"""
Account reference models used to build entity groups and pacing alerts.

These mirror the client-info, key-contacts and budget-status sheets. Only
the columns the engine needs are modeled.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .performance import coerce_number


class AccountDetail(BaseModel):
    """
    Client account metadata.

    Attributes:
        client_name: Client name (joins to PerformanceRecord.entity_id)
        auto_group: Auto group the client belongs to, if any
        brands: Brands the client's store carries
    """

    model_config = ConfigDict(frozen=True)

    client_name: str
    auto_group: Optional[str] = None
    brands: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("brands", mode="before")
    @classmethod
    def split_brands(cls, v: Any) -> tuple[str, ...]:
        """The sheet stores brands as one comma-separated cell."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        return tuple(b.strip() for b in v if b and str(b).strip())

    @field_validator("auto_group", mode="before")
    @classmethod
    def blank_auto_group(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class KeyContact(BaseModel):
    """Who manages a client: its PPC and PDM contacts."""

    model_config = ConfigDict(frozen=True)

    client_name: str
    ppc: Optional[str] = None
    pdm: Optional[str] = None

    @field_validator("ppc", "pdm", mode="before")
    @classmethod
    def blank_contact(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def manager_for(self, role: str) -> Optional[str]:
        return self.ppc if role.upper() == "PPC" else self.pdm


class BudgetStatus(BaseModel):
    """
    Month-to-date paid search budget status for one client.

    Attributes:
        client_name: Client name
        ppc_budget: Monthly budget
        google_spend: Google Ads spend to date
        bing_spend: Microsoft Ads spend to date
        percent_spent: Share of the budget spent so far, percent
        target_spend: Share of the budget expected by today, percent
        projected_total_spend: Month-end spend at the current run rate,
            percent of budget
    """

    model_config = ConfigDict(frozen=True)

    client_name: str
    ppc_budget: float = 0.0
    google_spend: float = 0.0
    bing_spend: float = 0.0
    percent_spent: float = 0.0
    target_spend: float = 0.0
    projected_total_spend: float = 0.0

    @field_validator(
        "ppc_budget",
        "google_spend",
        "bing_spend",
        "percent_spent",
        "target_spend",
        "projected_total_spend",
        mode="before",
    )
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return coerce_number(v)

    @property
    def total_spend(self) -> float:
        return self.google_spend + self.bing_spend
