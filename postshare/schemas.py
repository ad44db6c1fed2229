from datetime import datetime
from typing import Annotated, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _check_email(value: str) -> str:
    """Reject malformed addresses but keep the value exactly as sent."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"value is not a valid email address: {exc}") from exc
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class CamelModel(BaseModel):
    """Base for payloads exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


# ----- User Schemas -----


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SignUpRequest(CamelModel):
    email: Email
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: Email
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    access_token: str
    user: UserOut


# ----- Post Schemas -----


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    published: bool = True


class PostUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    published: Optional[bool] = None

    def changes(self) -> dict:
        """Fields the caller actually supplied; explicit nulls count as absent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PostOut(CamelModel):
    id: int
    title: str
    content: str
    published: bool
    author_id: int
    created_at: datetime
    updated_at: datetime
    author: Optional[UserOut] = None


# ----- Error Schemas -----


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode")
    timestamp: str
    path: str
    method: str
    message: str


def format_errors(exc) -> List[str]:
    """Flatten pydantic or FastAPI validation errors into readable messages."""
    messages = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"] if p != "body")
        messages.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return messages
