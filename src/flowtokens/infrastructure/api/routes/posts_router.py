"""Router for posts.

Every save fires ``on_post_before_save`` and ``on_post_after_save``
filtered by ``post_type``. Posts of a tracked type get an access token on
their first save.
"""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from flowtokens.core.hooks import HookEvent, HookRegistry
from flowtokens.core.logging import get_logger
from flowtokens.core.meta_registry import MetaFieldRegistry
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import HookContext
from flowtokens.infrastructure.api.dependencies import (
    Context,
    DbSession,
    Hooks,
    MetaFields,
    collect_meta,
)
from flowtokens.infrastructure.api.schemas.posts_schemas import (
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from flowtokens.infrastructure.persistence.models import PostModel
from flowtokens.infrastructure.persistence.repositories import PostRepository

router = APIRouter(tags=["Posts"])
logger = get_logger(__name__)

EDITABLE_FIELDS = ("post_type", "title", "content", "status")


async def _to_response(
    session: AsyncSession, meta_fields: MetaFieldRegistry, post: PostModel
) -> PostResponse:
    return PostResponse(
        id=post.id,
        post_type=post.post_type,
        title=post.title,
        content=post.content,
        status=post.status,
        created_at=post.created_at,
        updated_at=post.updated_at,
        meta=await collect_meta(session, meta_fields, EntityKind.POST, post.id),
    )


async def _save(
    post: PostModel,
    changes: dict,
    update: bool,
    session: AsyncSession,
    hooks: HookRegistry,
    context: HookContext,
) -> PostModel:
    """Run the save hooks around persisting a post.

    Args:
        post: New or loaded post model.
        changes: Field values to apply.
        update: False for the first save of a post.
        session: Database session.
        hooks: Hook registry.
        context: Hook context of the request.

    Returns:
        The saved post.

    Raises:
        HTTPException: If a before-hook aborts the save, or an after-hook fails.
    """
    post_type = changes.get("post_type") or post.post_type
    before = await hooks.trigger(
        HookEvent.ON_POST_BEFORE_SAVE,
        {"id": post.id, "update": update, **changes},
        context,
        filters={"post_type": post_type},
    )
    if before.aborted:
        raise HTTPException(status_code=before.abort_status_code, detail=before.abort_message)
    if before.data is not None:
        changes = before.data

    for field in EDITABLE_FIELDS:
        if changes.get(field) is not None:
            setattr(post, field, changes[field])

    repo = PostRepository(session)
    if update:
        post = await repo.update(post)
    else:
        post = await repo.create(post)
        await session.refresh(post)
    await session.commit()

    logger.info("Post saved", post_id=post.id, post_type=post.post_type, update=update)

    after = await hooks.trigger(
        HookEvent.ON_POST_AFTER_SAVE,
        {"id": post.id, "post_type": post.post_type, "update": update},
        context,
        filters={"post_type": post.post_type},
    )
    if not after.success:
        logger.error("Post hooks failed", post_id=post.id, errors=after.errors)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Post was saved but its hooks failed",
        )
    return post


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
)
async def create_post(
    post_data: PostCreateRequest,
    session: DbSession,
    hooks: Hooks,
    meta_fields: MetaFields,
    context: Context,
) -> PostResponse:
    """Save a new post. Job sheets and acts receive an access token."""
    post = await _save(PostModel(), post_data.model_dump(), False, session, hooks, context)
    return await _to_response(session, meta_fields, post)


@router.get(
    "/{post_id}",
    status_code=status.HTTP_200_OK,
    summary="Get a post",
    responses={404: {"description": "Post not found"}},
)
async def get_post(post_id: int, session: DbSession, meta_fields: MetaFields) -> PostResponse:
    post = await PostRepository(session).get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return await _to_response(session, meta_fields, post)


@router.put(
    "/{post_id}",
    status_code=status.HTTP_200_OK,
    summary="Update a post",
    responses={404: {"description": "Post not found"}},
)
async def update_post(
    post_id: int,
    post_data: PostUpdateRequest,
    session: DbSession,
    hooks: Hooks,
    meta_fields: MetaFields,
    context: Context,
) -> PostResponse:
    """Save changes to a post. An existing access token is never replaced."""
    post = await PostRepository(session).get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    changes = post_data.model_dump(exclude_unset=True, exclude_none=True)
    post = await _save(post, changes, True, session, hooks, context)
    return await _to_response(session, meta_fields, post)
