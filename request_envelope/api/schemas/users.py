"""Request and response models of the users resource."""

from datetime import date
from enum import Enum
from typing import Annotated, Final

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_core import PydanticCustomError

INT32_MIN: Final[int] = -(2**31)
INT32_MAX: Final[int] = 2**31 - 1


def _reject_bool(value: object) -> object:
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


def _check_int32(value: int) -> int:
    if not INT32_MIN <= value <= INT32_MAX:
        raise PydanticCustomError(
            "int_out_of_range",
            "Input should be a 32-bit signed integer",
            {"min": INT32_MIN, "max": INT32_MAX},
        )
    return value


# Identifiers are stored as 32-bit integers; booleans and larger values are rejected
Int32 = Annotated[int, BeforeValidator(_reject_bool), AfterValidator(_check_int32)]


class Status(Enum):
    """Lifecycle status of a user."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CreateRequest(BaseModel):
    """Body of a user creation request."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: Int32 = Field(..., description="User identifier", examples=[1])
    name: str = Field(..., description="Display name", examples=["Ada"])
    status: Status | None = Field(default=None, description="Lifecycle status")
    start_date: date | None = Field(
        default=None,
        alias="startDate",
        description="Date the user becomes active",
        examples=["2025-01-01"],
    )


class User(BaseModel):
    """A user as returned by the API."""

    id: int
    include_address: bool = False
