"""Project models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DESCRIPTION_MAX_LENGTH = 200


class Project(BaseModel):
    """A project owned by exactly one identity.

    Field aliases keep the stored JSON compatible with the original
    ``projects_<email>`` records (``createdAt``, ``userId``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    created_at: datetime = Field(alias="createdAt")
    owner_key: str = Field(alias="userId")


ProjectCollection = TypeAdapter(list[Project])


def projects_key(identity_key: str) -> str:
    """Storage key of an identity's project collection."""
    return f"projects_{identity_key}"
