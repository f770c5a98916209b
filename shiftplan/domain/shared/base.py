"""Base classes for domain entities and value objects."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

ModelT = TypeVar("ModelT", bound="Entity")


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Entity(BaseModel):
    """
    Base class for entities (have identity).

    Entities are frozen snapshots: the engine never mutates its inputs, so a
    change produces a new instance through ``with_changes``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        return hash((self.__class__.__name__, self.id))

    def same_state_as(self, other: "Entity") -> bool:
        """Field-by-field comparison, unlike ``==`` which compares identity."""
        return self.model_dump() == other.model_dump()

    def with_changes(self: ModelT, **changes: Any) -> ModelT:
        """
        Return a validated copy of the entity with the given fields replaced.

        Derived fields are recomputed because the copy goes through the
        model validators again.
        """
        return type(self).model_validate({**self.model_dump(), **changes})
