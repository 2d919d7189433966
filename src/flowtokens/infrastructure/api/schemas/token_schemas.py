"""Pydantic schemas for token lookup endpoints."""

from pydantic import BaseModel, Field

from flowtokens.domain.entities.entity_kind import EntityKind


class TokenResponse(BaseModel):
    """An access token and the entity that owns it."""

    kind: EntityKind = Field(..., description="Entity kind ('user' or 'post')")
    entity_id: int = Field(..., description="Id of the owning entity")
    token: str = Field(..., description="URL-safe access token")
