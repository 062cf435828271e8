"""Base model for records, views and notices."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Immutable pydantic model.

    Models with equal field values compare equal, so two renders of the same
    tree can be compared directly.
    """

    model_config = ConfigDict(frozen=True)
