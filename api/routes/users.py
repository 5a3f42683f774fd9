"""
api/routes/users.py -- User management REST endpoints.

Routes:
  GET    /api/users?filter=&value=  -- list users, optional substring filter
  POST   /api/users                 -- create user; 201
  GET    /api/users/{user_id}       -- one user
  PUT    /api/users/{user_id}       -- replace name/displayName/password
  PATCH  /api/users/{user_id}       -- update only the supplied fields
  DELETE /api/users/{user_id}       -- remove user; 204

{user_id} is resolved by resolve_user(): a non-numeric id is 400, an unknown
id is 404, before the handler runs.

Responses always use the public view {id, name, displayName}. Deleting a
user that is logged in somewhere ends that session's authentication on its
next request (AuthFlow.status() can no longer hydrate the id).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from api.models import ErrorResponse, UserCreate, UserPatch, UserResponse
from auth.models import UserRecord
from auth.store import UserStore
from core.errors import MalformedInput, NotFound

router = APIRouter(responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})


def _store(request: Request) -> UserStore:
    return request.app.state.user_store


def resolve_user(request: Request, user_id: str) -> UserRecord:
    """Parse the {user_id} path segment and load the user."""
    try:
        parsed = int(user_id)
    except ValueError:
        raise MalformedInput("Invalid user ID, Bad Request") from None
    user = _store(request).find_by_id(parsed)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/users", response_model=list[UserResponse])
def list_users(
    request: Request,
    filter_field: Optional[str] = Query(
        default=None,
        alias="filter",
        min_length=3,
        max_length=10,
        description="Field to filter on: name or displayName.",
    ),
    value: Optional[str] = Query(default=None, max_length=255),
) -> list[UserResponse]:
    users = _store(request).list_users(filter_field, value)
    return [UserResponse.from_user(u) for u in users]


@router.post("/users", response_model=UserResponse, status_code=201, responses={409: {"model": ErrorResponse}})
def create_user(request: Request, body: UserCreate) -> UserResponse:
    created = _store(request).create_user(body.name, body.display_name, password=body.password)
    return UserResponse.from_user(created)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user: UserRecord = Depends(resolve_user)) -> UserResponse:
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse, responses={409: {"model": ErrorResponse}})
def replace_user(
    request: Request,
    body: UserCreate,
    user: UserRecord = Depends(resolve_user),
) -> UserResponse:
    """Replace every mutable field. An omitted password clears it (the user can no longer log in)."""
    updated = _store(request).replace_user(user.id, body.name, body.display_name, password=body.password)
    if updated is None:
        raise NotFound("User not found")
    return UserResponse.from_user(updated)


@router.patch("/users/{user_id}", response_model=UserResponse, responses={409: {"model": ErrorResponse}})
def patch_user(
    request: Request,
    body: UserPatch,
    user: UserRecord = Depends(resolve_user),
) -> UserResponse:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise MalformedInput("No fields to update.")
    updated = _store(request).update_user(user.id, **fields)
    if updated is None:
        raise NotFound("User not found")
    return UserResponse.from_user(updated)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(request: Request, user: UserRecord = Depends(resolve_user)) -> Response:
    if not _store(request).delete_user(user.id):
        raise NotFound("User not found")
    return Response(status_code=204)
