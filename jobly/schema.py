"""
Request payload and query-string schemas.

These run before any data reaches the SQL builders, so every field name a
builder can see is one declared here. Unknown fields are rejected.
"""

from typing import Annotated, Any, List, Mapping, Optional, Type, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInput

ModelT = TypeVar("ModelT", bound=BaseModel)


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except ValueError:
        return False


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _check_logo_url(v: str) -> str:
    if not _valid_url(v):
        raise ValueError("must be a valid absolute URL (scheme + host)")
    return v


LogoUrl = Annotated[str, AfterValidator(_check_logo_url)]


# Companies

class CompanyNew(_Strict):
    handle: str = Field(min_length=1, max_length=25)
    name: str = Field(min_length=1)
    description: str
    numEmployees: Optional[int] = Field(default=None, ge=0)
    logoUrl: Optional[LogoUrl] = None


# Update schemas leave a field unset by omitting it. Only nullable columns
# accept an explicit null.

class CompanyUpdate(_Strict):
    name: str = Field(default=None, min_length=1)
    description: str = None
    numEmployees: Optional[int] = Field(default=None, ge=0)
    logoUrl: Optional[LogoUrl] = None


class CompanySearch(_Strict):
    nameLike: Optional[str] = Field(default=None, min_length=1)
    minEmployees: Optional[int] = Field(default=None, ge=0)
    maxEmployees: Optional[int] = Field(default=None, ge=0)


# Jobs

class JobNew(_Strict):
    title: str = Field(min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)
    companyHandle: str = Field(min_length=1, max_length=25)


class JobUpdate(_Strict):
    title: str = Field(default=None, min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)


class JobSearch(_Strict):
    title: Optional[str] = Field(default=None, min_length=1)
    minSalary: Optional[int] = Field(default=None, ge=0)
    hasEquity: Optional[bool] = None


# Users

class UserAuth(_Strict):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=1)


class UserRegister(_Strict):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=5, max_length=20)
    firstName: str = Field(min_length=1, max_length=30)
    lastName: str = Field(min_length=1, max_length=30)
    email: str = Field(min_length=6, max_length=60, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserNew(UserRegister):
    isAdmin: bool = False


class UserUpdate(_Strict):
    password: str = Field(default=None, min_length=5, max_length=20)
    firstName: str = Field(default=None, min_length=1, max_length=30)
    lastName: str = Field(default=None, min_length=1, max_length=30)
    email: str = Field(
        default=None, min_length=6, max_length=60, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )


def format_errors(exc: ValidationError) -> List[str]:
    """Flatten pydantic errors into 'field: message' strings."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return messages


def validate_payload(model: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate raw data against a schema.

    Raises:
        InvalidInput: With every validation message joined together
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidInput("; ".join(format_errors(e))) from e
