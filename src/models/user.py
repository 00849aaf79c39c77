"""
User entity and request models
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

USERS_TABLE = "users"
USER_ID_FIELD = "id"
USER_WRITABLE_FIELDS = ("firstname", "lastname")
USER_COLUMNS = (USER_ID_FIELD,) + USER_WRITABLE_FIELDS

USERS_TABLE_DDL = f"""
    CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
        id SERIAL PRIMARY KEY,
        firstname VARCHAR(255) NOT NULL,
        lastname VARCHAR(255) NOT NULL
    )
"""


class User(BaseModel):
    """A row of the users table. ``id`` is None until the record is saved."""
    id: Optional[int] = None
    firstname: str
    lastname: str


class UserCreateRequest(BaseModel):
    firstname: str = Field(..., description="First name of the user")
    lastname: str = Field(..., description="Last name of the user")


class UserUpdateRequest(BaseModel):
    firstname: Optional[str] = Field(None, description="New first name")
    lastname: Optional[str] = Field(None, description="New last name")

    @field_validator("firstname", "lastname")
    @classmethod
    def reject_null(cls, value):
        # Fields may be omitted, but a sent value must be a string
        if value is None:
            raise ValueError("must be a string, not null")
        return value
