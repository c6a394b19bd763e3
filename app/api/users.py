"""
app/api/users.py

Purpose: User directory HTTP endpoints (XML in, XML out)

- Maps verbs/paths onto UserService operations
- Maps service outcomes to status codes and XML envelopes
- Guards DELETE with the Basic auth gate
- List endpoints degrade to an empty list on unexpected failures
"""

from fastapi import APIRouter, Depends, Header, Path, Query, Request, status
from typing import Optional, Type

from app.api.deps import get_user_service
from app.core.config import settings
from app.core.exceptions import AuthenticationError, UnsupportedMediaTypeError, UserDirectoryError, UserNotFoundError
from app.core.logging import get_logger
from app.core.security import authenticate
from app.models.user import MAX_USER_ID, UserCreate, UserPatch, validate_user_payload, ModelT
from app.schemas.response import ApiResponse, UsersResponse
from app.schemas.xml import (
    XMLResponse,
    api_response,
    error_response,
    parse_user_xml,
    user_response,
    users_response,
)
from app.services.user_service import UserService

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


def _unexpected(action: str, exc: Exception) -> str:
    """Generic 500 message; the cause is only exposed outside production."""
    if settings.is_production:
        return action
    return f"{action}: {exc}"


async def read_user_payload(request: Request, model: Type[ModelT]) -> ModelT:
    """
    Reads and validates an XML <user> body.

    Raises:
        UnsupportedMediaTypeError: content type is set and is not XML
        MalformedPayloadError: body is not a <user> document
        PayloadValidationError: field constraints violated
    """
    content_type = request.headers.get("content-type", "")
    if content_type and "xml" not in content_type.lower():
        raise UnsupportedMediaTypeError(content_type)

    fields = parse_user_xml(await request.body())
    return validate_user_payload(model, fields)


async def _list_response(loader, description: str) -> XMLResponse:
    # Failures surface as an empty list with 200 so existing clients keep working
    try:
        users = await loader()
    except Exception as e:
        logger.error(f"Error {description}: {e}", exc_info=True)
        users = []
    return users_response(UsersResponse(users=users))


@router.get("", response_class=XMLResponse, summary="List all users")
async def get_all_users(service: UserService = Depends(get_user_service)):
    return await _list_response(service.list_all, "listing users")


@router.get("/search", response_class=XMLResponse, summary="Search users by name")
async def search_users(
    name: str = Query(..., description="Case-insensitive substring of the user's name"),
    service: UserService = Depends(get_user_service),
):
    logger.info(f"Searching users by name '{name}'")
    return await _list_response(lambda: service.search(name), "searching users")


@router.get("/active", response_class=XMLResponse, summary="List active users")
async def get_active_users(service: UserService = Depends(get_user_service)):
    return await _list_response(service.list_active, "listing active users")


@router.get("/{user_id}", response_class=XMLResponse, summary="Get a user by id")
async def get_user(user_id: int = Path(..., ge=1, le=MAX_USER_ID), service: UserService = Depends(get_user_service)):
    try:
        user = await service.get_by_id(user_id)
    except Exception as e:
        logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
        return error_response(_unexpected("Error retrieving user", e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if user is None:
        return error_response(UserNotFoundError(user_id).message, status.HTTP_404_NOT_FOUND)
    return user_response(user)


@router.post("", response_class=XMLResponse, status_code=status.HTTP_201_CREATED, summary="Create a user")
async def create_user(request: Request, service: UserService = Depends(get_user_service)):
    try:
        candidate = await read_user_payload(request, UserCreate)
        user = await service.create(candidate)
        return user_response(user, status.HTTP_201_CREATED)
    except UserDirectoryError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        logger.error(f"Error creating user: {e}", exc_info=True)
        return error_response(_unexpected("Error creating user", e), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.put("/{user_id}", response_class=XMLResponse, summary="Replace a user")
async def update_user(request: Request, user_id: int = Path(..., ge=1, le=MAX_USER_ID), service: UserService = Depends(get_user_service)):
    try:
        replacement = await read_user_payload(request, UserCreate)
        user = await service.full_update(user_id, replacement)
        return user_response(user)
    except UserDirectoryError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        logger.error(f"Error updating user {user_id}: {e}", exc_info=True)
        return error_response(_unexpected("Error updating user", e), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.patch("/{user_id}", response_class=XMLResponse, summary="Partially update a user")
async def partial_update_user(request: Request, user_id: int = Path(..., ge=1, le=MAX_USER_ID), service: UserService = Depends(get_user_service)):
    try:
        patch = await read_user_payload(request, UserPatch)
        user = await service.partial_update(user_id, patch)
        return user_response(user)
    except UserDirectoryError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        logger.error(f"Error patching user {user_id}: {e}", exc_info=True)
        return error_response(_unexpected("Error updating user", e), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.delete("/{user_id}", response_class=XMLResponse, summary="Delete a user (Basic auth)")
async def delete_user(
    user_id: int = Path(..., ge=1, le=MAX_USER_ID),
    authorization: Optional[str] = Header(None),
    service: UserService = Depends(get_user_service),
):
    """
    Requires `Authorization: Basic base64(username:password)` matching
    the configured admin credentials.
    """
    if not authenticate(authorization):
        denied = AuthenticationError()
        return error_response(denied.message, denied.status_code, headers={"WWW-Authenticate": "Basic"})

    try:
        await service.delete(user_id)
        return api_response(ApiResponse.success(f"User with ID {user_id} has been deleted successfully"))
    except UserDirectoryError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        logger.error(f"Error deleting user {user_id}: {e}", exc_info=True)
        return error_response(_unexpected("Error deleting user", e), status.HTTP_500_INTERNAL_SERVER_ERROR)
