"""
Entity group models.

An EntityGroup is the selection a dashboard aggregates over: a brand's
clients, a manager's book of business, an auto group, or a hand-curated set.
Membership changes always produce a new group.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GroupMember(BaseModel):
    """A client in a group, with its include/exclude toggle."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    included: bool = True


class EntityGroup(BaseModel):
    """
    Named set of clients with per-member inclusion flags.

    Only members with ``included=True`` contribute to aggregation. Members
    are kept in insertion order; duplicates are dropped on construction.

    Example:
        >>> group = EntityGroup.from_names("Acme Brand", ["Shop A", "Shop B"])
        >>> group = group.toggle("Shop B")
        >>> sorted(group.included_ids)
        ['Shop A']
    """

    model_config = ConfigDict(frozen=True)

    name: str
    members: tuple[GroupMember, ...] = Field(default_factory=tuple)

    @field_validator("members")
    @classmethod
    def drop_duplicate_members(
        cls, v: tuple[GroupMember, ...]
    ) -> tuple[GroupMember, ...]:
        seen: set[str] = set()
        unique = []
        for member in v:
            if member.entity_id in seen:
                continue
            seen.add(member.entity_id)
            unique.append(member)
        return tuple(unique)

    @classmethod
    def from_names(cls, name: str, entity_ids, included: bool = True) -> "EntityGroup":
        return cls(
            name=name,
            members=tuple(GroupMember(entity_id=e, included=included) for e in entity_ids),
        )

    @property
    def included_ids(self) -> frozenset[str]:
        return frozenset(m.entity_id for m in self.members if m.included)

    @property
    def member_ids(self) -> list[str]:
        return [m.entity_id for m in self.members]

    def is_empty(self) -> bool:
        return not self.included_ids

    def toggle(self, entity_id: str) -> "EntityGroup":
        """Flip one member's inclusion flag; unknown ids leave the group as is."""
        members = tuple(
            GroupMember(entity_id=m.entity_id, included=not m.included)
            if m.entity_id == entity_id
            else m
            for m in self.members
        )
        return self.model_copy(update={"members": members})

    def with_member(self, entity_id: str, rename_to: str = "Custom Group") -> "EntityGroup":
        """
        Add a client to the group, keeping members sorted by name.

        Adding a client turns a predefined group into a custom one, so the
        new group is renamed. Adding an existing member is a no-op.
        """
        if entity_id in self.member_ids:
            return self
        members = sorted(
            (*self.members, GroupMember(entity_id=entity_id, included=True)),
            key=lambda m: m.entity_id.lower(),
        )
        return EntityGroup(name=rename_to, members=tuple(members))
