"""Account API endpoints.

Provides routes for:
- Public profiles (own and others)
- Role changes (administrators)
"""

from uuid import UUID

from fastapi import APIRouter

from clipfeed.auth.dependencies import CurrentUser, OptionalUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import AccountServiceDep
from .schemas import AccountResponse, ChangeRoleRequest, UserProfileResponse


router = APIRouter(prefix="/v1/accounts", tags=["accounts"])
admin_router = APIRouter(prefix="/v1/admin/accounts", tags=["admin"])


@router.get(
    "/me/profile", response_model=UserProfileResponse, summary="Own profile"
)
async def get_my_profile(
    account_service: AccountServiceDep,
    user: CurrentUser,
) -> UserProfileResponse:
    try:
        profile = await account_service.get_user_profile(user.id, viewer_id=user.id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return UserProfileResponse.from_profile(profile)


@router.get(
    "/{account_id}/profile", response_model=UserProfileResponse, summary="Profile"
)
async def get_profile(
    account_id: UUID,
    account_service: AccountServiceDep,
    user: OptionalUser,
) -> UserProfileResponse:
    try:
        profile = await account_service.get_user_profile(
            account_id, viewer_id=user.id if user else None
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return UserProfileResponse.from_profile(profile)


@admin_router.put(
    "/{account_id}/role",
    response_model=AccountResponse,
    summary="Change role (administrator)",
)
async def change_role(
    account_id: UUID,
    data: ChangeRoleRequest,
    account_service: AccountServiceDep,
    user: CurrentUser,
) -> AccountResponse:
    try:
        account = await account_service.change_role(user.role, account_id, data.role)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return AccountResponse.from_account(account)
