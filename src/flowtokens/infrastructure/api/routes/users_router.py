"""Router for users.

Registering or updating a user fires the user hooks; the built-in token
hooks attach the user's ``flow_rand_tok`` access token.
"""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from flowtokens.core.hooks import HookEvent
from flowtokens.core.logging import get_logger
from flowtokens.core.meta_registry import MetaFieldRegistry
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import HookResult
from flowtokens.infrastructure.api.dependencies import (
    Context,
    DbSession,
    Hooks,
    MetaFields,
    collect_meta,
)
from flowtokens.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from flowtokens.infrastructure.persistence.models import UserModel
from flowtokens.infrastructure.persistence.repositories import UserRepository

router = APIRouter(tags=["Users"])
logger = get_logger(__name__)


def _raise_if_aborted(result: HookResult) -> None:
    if result.aborted:
        raise HTTPException(
            status_code=result.abort_status_code,
            detail=result.abort_message,
        )


def _raise_if_failed(result: HookResult, user_id: int) -> None:
    if not result.success:
        logger.error("User hooks failed", user_id=user_id, errors=result.errors)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="User was saved but its hooks failed",
        )


def _hook_data(user: UserModel) -> dict:
    return {"id": user.id, "email": user.email, "display_name": user.display_name}


async def _to_response(
    session: AsyncSession, meta_fields: MetaFieldRegistry, user: UserModel
) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        created_at=user.created_at,
        updated_at=user.updated_at,
        meta=await collect_meta(session, meta_fields, EntityKind.USER, user.id),
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={409: {"description": "Email already registered"}},
)
async def create_user(
    user_data: UserCreateRequest,
    session: DbSession,
    hooks: Hooks,
    meta_fields: MetaFields,
    context: Context,
) -> UserResponse:
    """Register a user and issue its access token."""
    before = await hooks.trigger(
        HookEvent.ON_USER_BEFORE_CREATE, user_data.model_dump(), context
    )
    _raise_if_aborted(before)
    fields = {**user_data.model_dump(), **(before.data or {})}

    user_repo = UserRepository(session)
    if await user_repo.get_by_email(fields["email"]) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{fields['email']}' already exists",
        )

    user = await user_repo.create(
        UserModel(email=fields["email"], display_name=fields.get("display_name", ""))
    )
    await session.refresh(user)
    await session.commit()

    logger.info("User created", user_id=user.id)

    after = await hooks.trigger(HookEvent.ON_USER_AFTER_CREATE, _hook_data(user), context)
    _raise_if_failed(after, user.id)

    return await _to_response(session, meta_fields, user)


@router.get(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Get a user",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: int, session: DbSession, meta_fields: MetaFields) -> UserResponse:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await _to_response(session, meta_fields, user)


@router.patch(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Update a user profile",
    responses={
        404: {"description": "User not found"},
        409: {"description": "Email already registered"},
    },
)
async def update_user(
    user_id: int,
    user_data: UserUpdateRequest,
    session: DbSession,
    hooks: Hooks,
    meta_fields: MetaFields,
    context: Context,
) -> UserResponse:
    """Update a user's profile.

    Users registered before tokens were issued receive one on their first
    profile update.
    """
    user_repo = UserRepository(session)
    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    changes = user_data.model_dump(exclude_unset=True, exclude_none=True)
    before = await hooks.trigger(
        HookEvent.ON_USER_BEFORE_UPDATE, {"id": user_id, **changes}, context
    )
    _raise_if_aborted(before)
    if before.data is not None:
        changes = {k: v for k, v in before.data.items() if k != "id"}

    new_email = changes.get("email")
    if new_email is not None and new_email != user.email:
        if await user_repo.get_by_email(new_email) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"User with email '{new_email}' already exists",
            )
        user.email = new_email
    if changes.get("display_name") is not None:
        user.display_name = changes["display_name"]

    user = await user_repo.update(user)
    await session.commit()

    logger.info("User updated", user_id=user.id, fields=sorted(changes))

    after = await hooks.trigger(HookEvent.ON_USER_AFTER_UPDATE, _hook_data(user), context)
    _raise_if_failed(after, user.id)

    return await _to_response(session, meta_fields, user)
