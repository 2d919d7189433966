"""FastAPI dependencies.

Services are built once by the application factory and kept on
``app.state``; these dependencies hand them to route handlers.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from flowtokens.core.hooks import HookRegistry
from flowtokens.core.meta_registry import MetaFieldRegistry
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import HookContext
from flowtokens.domain.services import TokenLookup
from flowtokens.infrastructure.persistence.repositories import MetaRepository


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session from the application's database manager."""
    async with request.app.state.db.session() as session:
        yield session


def get_hook_registry(request: Request) -> HookRegistry:
    return request.app.state.hook_registry


def get_meta_fields(request: Request) -> MetaFieldRegistry:
    return request.app.state.meta_fields


def get_token_lookup(request: Request) -> TokenLookup:
    return request.app.state.token_lookup


def get_hook_context(request: Request) -> HookContext:
    """Build the hook context for the current request."""
    return HookContext(
        app=request.app,
        request_id=getattr(request.state, "correlation_id", ""),
    )


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Hooks = Annotated[HookRegistry, Depends(get_hook_registry)]
MetaFields = Annotated[MetaFieldRegistry, Depends(get_meta_fields)]
Lookup = Annotated[TokenLookup, Depends(get_token_lookup)]
Context = Annotated[HookContext, Depends(get_hook_context)]


async def collect_meta(
    session: AsyncSession,
    meta_fields: MetaFieldRegistry,
    kind: EntityKind,
    entity_id: int,
) -> dict[str, str | None]:
    """Read the API-exposed meta keys of an entity."""
    repo = MetaRepository(session)
    return {
        field.key: await repo.read_attribute(kind, entity_id, field.key)
        for field in meta_fields.rest_fields(kind)
    }
