"""Router for access token lookups."""

from fastapi import APIRouter, HTTPException, status

from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.infrastructure.api.dependencies import Lookup
from flowtokens.infrastructure.api.schemas.token_schemas import TokenResponse

router = APIRouter(tags=["Tokens"])
logger = get_logger(__name__)


@router.get(
    "/{kind}/entities/{entity_id}",
    status_code=status.HTTP_200_OK,
    summary="Get the access token of an entity",
    responses={404: {"description": "Unknown kind, or the entity has no token"}},
)
async def get_token_for_entity(kind: str, entity_id: int, lookup: Lookup) -> TokenResponse:
    entity_kind = EntityKind.parse(kind)
    token = await lookup.token_for(entity_kind, entity_id)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No access token for {entity_kind.value} {entity_id}",
        )
    return TokenResponse(kind=entity_kind, entity_id=entity_id, token=token)


@router.get(
    "/{kind}/{token}",
    status_code=status.HTTP_200_OK,
    summary="Resolve an access token to its entity",
    responses={404: {"description": "Unknown kind, or no entity holds the token"}},
)
async def resolve_token(kind: str, token: str, lookup: Lookup) -> TokenResponse:
    """Find the entity of the given kind that holds ``token``.

    Tokens only resolve within their own kind: a user token never matches
    a post.
    """
    access_token = await lookup.resolve(kind, token)
    if access_token is None:
        logger.debug("Token lookup miss", kind=kind)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")
    return TokenResponse(
        kind=access_token.kind,
        entity_id=access_token.entity_id,
        token=access_token.token,
    )
