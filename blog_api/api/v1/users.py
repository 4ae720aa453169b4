"""Current-user profile endpoints and the admin-only user routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from blog_api.api.v1.auth import clear_refresh_cookie
from blog_api.api.v1.deps import authorize, get_app_settings
from blog_api.core.config import Settings
from blog_api.core.database import get_db
from blog_api.core.errors import ConflictError, NotFoundError
from blog_api.models import User
from blog_api.schemas.user import UserProfile, UserUpdateRequest, UsersListResponse
from blog_api.services.credentials import (
    DuplicateUserError,
    delete_user,
    exists_by_email,
    exists_by_username,
    find_by_id,
    list_users,
    set_password,
    update_profile,
)

router = APIRouter()

any_user = authorize("admin", "user")
admin_only = authorize("admin")


@router.get("/current", response_model=UserProfile)
def get_current_user(
    user: Annotated[User, Depends(any_user)],
) -> UserProfile:
    return UserProfile.model_validate(user)


@router.put("/current", response_model=UserProfile)
def update_current_user(
    body: UserUpdateRequest,
    user: Annotated[User, Depends(any_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserProfile:
    """
    Update profile fields of the authenticated user.

    The password hash is recomputed only when a new password is supplied.
    """
    changes = body.model_dump(exclude_unset=True, exclude={"password"})
    changes = {k: v for k, v in changes.items() if v is not None}

    if "username" in changes and changes["username"] != user.username:
        if exists_by_username(db, changes["username"]):
            raise ConflictError("This username is already in use")
    if "email" in changes and changes["email"] != user.email:
        if exists_by_email(db, changes["email"]):
            raise ConflictError("This email is already in use")

    try:
        if changes:
            user = update_profile(db, user, **changes)
    except DuplicateUserError as e:
        raise ConflictError("Username or email is already in use") from e
    if body.password is not None:
        user = set_password(db, user, body.password, rounds=settings.BCRYPT_ROUNDS)
    return UserProfile.model_validate(user)


@router.delete("/current", status_code=status.HTTP_204_NO_CONTENT)
def delete_current_user(
    user: Annotated[User, Depends(any_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Response:
    """Delete the account with all its refresh tokens and clear the refresh cookie."""
    delete_user(db, user)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response, settings)
    return response


@router.get("", response_model=UsersListResponse)
def get_all_users(
    _admin: Annotated[User, Depends(admin_only)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
    offset: Annotated[int | None, Query(ge=0)] = None,
) -> UsersListResponse:
    """List users (admin only)."""
    limit = limit if limit is not None else settings.DEFAULT_RES_LIMIT
    offset = offset if offset is not None else settings.DEFAULT_RES_OFFSET
    total, users = list_users(db, limit=limit, offset=offset)
    return UsersListResponse(
        limit=limit,
        offset=offset,
        total=total,
        users=[UserProfile.model_validate(u) for u in users],
    )


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = find_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}", response_model=UserProfile)
def get_user(
    user_id: int,
    _admin: Annotated[User, Depends(admin_only)],
    db: Annotated[Session, Depends(get_db)],
) -> UserProfile:
    """Fetch one account by id (admin only)."""
    return UserProfile.model_validate(_get_user_or_404(db, user_id))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_by_id(
    user_id: int,
    _admin: Annotated[User, Depends(admin_only)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete one account and its refresh tokens (admin only)."""
    delete_user(db, _get_user_or_404(db, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
