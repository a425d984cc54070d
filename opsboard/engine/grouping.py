"""
Entity group builders.

Every dashboard view aggregates over an EntityGroup; these helpers build
the predefined ones from the account reference sheets:

- auto group: clients whose account lists the auto group
- brand: clients whose comma-separated brand list contains the brand
- manager: clients whose PPC or PDM contact is the manager ("All Clients"
  selects every client that has performance data)

Members start included and are sorted by client name.
"""

from collections.abc import Iterable
from typing import Union

import structlog

from opsboard.models.accounts import AccountDetail, KeyContact
from opsboard.models.enums import ContactRole
from opsboard.models.groups import EntityGroup
from opsboard.models.performance import PerformanceRecord

logger = structlog.get_logger()

ALL_CLIENTS = "All Clients"


def _sorted_unique(names: Iterable[str]) -> list[str]:
    return sorted(set(names), key=str.lower)


def group_for_auto_group(accounts: Iterable[AccountDetail], auto_group: str) -> EntityGroup:
    """All clients in one auto group. An empty name yields an empty group."""
    if not auto_group:
        return EntityGroup(name="No Group Selected")
    names = [a.client_name for a in accounts if a.auto_group == auto_group]
    return EntityGroup.from_names(auto_group, _sorted_unique(names))


def group_for_brand(accounts: Iterable[AccountDetail], brand: str) -> EntityGroup:
    """All clients carrying ``brand``, including multi-brand stores."""
    names = [a.client_name for a in accounts if brand in a.brands]
    return EntityGroup.from_names(brand, _sorted_unique(names))


def group_for_manager(
    contacts: Iterable[KeyContact],
    role: Union[ContactRole, str],
    manager: str,
    records: Iterable[PerformanceRecord] = (),
) -> EntityGroup:
    """
    A manager's book of business.

    Args:
        contacts: Key contact rows
        role: "PPC" or "PDM"
        manager: Manager name, or "All Clients"
        records: Performance records; used only for "All Clients"

    Raises:
        ValueError: If role is not PPC or PDM
    """
    role = ContactRole(role)
    if manager == ALL_CLIENTS:
        names = [r.entity_id for r in records]
    else:
        names = [c.client_name for c in contacts if c.manager_for(role.value) == manager]
    return EntityGroup.from_names(manager, _sorted_unique(names))


def managers_for_role(
    contacts: Iterable[KeyContact], role: Union[ContactRole, str]
) -> list[str]:
    """Selector options: "All Clients" then every manager for the role."""
    role = ContactRole(role)
    names = [c.manager_for(role.value) for c in contacts]
    return [ALL_CLIENTS, *sorted({n for n in names if n})]


def all_brands(accounts: Iterable[AccountDetail]) -> list[str]:
    return sorted({b for a in accounts for b in a.brands})


def single_brand_map(accounts: Iterable[AccountDetail]) -> dict[str, str]:
    """
    client -> brand, for dedicated single-brand stores only.

    Brand leaderboards count a client toward a brand only when the store
    carries exactly one brand; a multi-brand store's revenue cannot be
    attributed to any one of them.
    """
    return {a.client_name: a.brands[0] for a in accounts if len(a.brands) == 1}


def brand_groups(accounts: Iterable[AccountDetail]) -> list[EntityGroup]:
    """One group per brand, built from single-brand stores, sorted by brand."""
    by_brand: dict[str, list[str]] = {}
    for client, brand in single_brand_map(accounts).items():
        by_brand.setdefault(brand, []).append(client)

    groups = [
        EntityGroup.from_names(brand, _sorted_unique(clients))
        for brand, clients in sorted(by_brand.items())
    ]
    logger.debug("brand_groups_built", brands=len(groups))
    return groups
