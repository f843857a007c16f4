"""
Request/response schemas for the JSON API.

Fields are snake_case in Python and camelCase on the wire
(``user_id`` <-> ``userId``). Request models raise ValueErrors with the
message shown to the user; main.py passes them through as field errors.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- Auth ----------

class RegisterRequest(BaseModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def password_rules(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        # bcrypt cannot hash NUL bytes
        if "\x00" in v:
            raise ValueError("Password must not contain NUL characters")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserOut(WireModel):
    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None


class RegisterResponse(BaseModel):
    success: bool = True
    user: UserOut


class TokenResponse(BaseModel):
    token: str


# ---------- Expenses ----------

class ExpenseIn(BaseModel):
    """Body of POST /add-expense and PUT /expenses/{id} (full replace).

    ``amount`` takes numbers or numeric strings (form values arrive as
    strings) but not booleans. ``date`` must be an ISO-8601 string; a
    time-of-day part is accepted and dropped.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str
    amount: float = Field(..., allow_inf_nan=False)
    date: date
    description: str

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        if not v:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def amount_not_bool(cls, v):
        if isinstance(v, bool):
            raise ValueError("Amount must be a number")
        return v

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def iso_date(cls, v):
        if isinstance(v, date) and not isinstance(v, datetime):
            return v
        if not isinstance(v, str):
            raise ValueError("Date must be a valid date")
        v = v.strip()
        try:
            return date.fromisoformat(v)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError("Date must be a valid date")


class ExpenseOut(WireModel):
    id: int
    user_id: int
    title: str
    amount: float
    date: date
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExpenseEnvelope(BaseModel):
    success: bool = True
    expense: ExpenseOut


class MessageResponse(BaseModel):
    success: bool
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    success: bool = False
    errors: List[FieldError]
