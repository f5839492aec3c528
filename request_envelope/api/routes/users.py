"""Users resource.

Every route answers JSON only; the POST route also requires a JSON body.
Binding and validation failures are left to the exception handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from request_envelope.api.constants import USERS_PREFIX
from request_envelope.api.dependencies import JSONResponseRoute, require_json_body
from request_envelope.api.schemas.users import INT32_MAX, INT32_MIN, CreateRequest, User

router = APIRouter(prefix=USERS_PREFIX, tags=["users"], route_class=JSONResponseRoute)


@router.get("/{user_id}")
async def get_user(
    user_id: Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)],
    include_address: Annotated[bool, Query(alias="includeAddress")] = False,
) -> User:
    """Get a user by identifier.

    Args:
        user_id: The user identifier.
        include_address: Whether the address should be included.

    Returns:
        User: The requested user.
    """
    return User(id=user_id, include_address=include_address)


@router.post("", dependencies=[Depends(require_json_body)])
async def create_user(body: CreateRequest) -> User:
    """Create a user.

    Args:
        body: The validated creation request.

    Returns:
        User: The created user.
    """
    return User(id=body.id)
