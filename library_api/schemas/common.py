from typing import ClassVar, FrozenSet

from pydantic import BaseModel


class PartialUpdate(BaseModel):
    """Base for PATCH/PUT bodies where every field is optional."""

    # Columns that may be omitted but never cleared
    required_fields: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> dict:
        """
        Fields the client actually sent.

        Raises ValueError when a required field is sent as null.
        """
        values = self.model_dump(exclude_unset=True)
        cleared = sorted(f for f in self.required_fields if f in values and values[f] is None)
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return values
