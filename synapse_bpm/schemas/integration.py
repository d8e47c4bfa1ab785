from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, Field, field_serializer, field_validator

from synapse_bpm.schemas.common import CamelModel, PartialUpdate

AuthType = Literal["none", "bearer", "basic", "api_key"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


def _check_base_url(value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")) or len(value.split("://", 1)[1]) == 0:
        raise ValueError("baseUrl must be an absolute http(s) URL")
    return value.rstrip("/")


BaseUrl = Annotated[str, AfterValidator(_check_base_url)]


def _check_headers(value: dict[str, str]) -> dict[str, str]:
    for name, header_value in value.items():
        if not (name.isascii() and header_value.isascii()):
            raise ValueError(f"Header {name!r} must contain only ASCII characters")
    return value


Headers = Annotated[dict[str, str], AfterValidator(_check_headers)]

REDACTED = "***"
SECRET_AUTH_KEYS = frozenset({"token", "password", "key"})


def mask_auth_config(auth_config: dict[str, Any] | None) -> dict[str, Any] | None:
    """Replace stored credentials with a placeholder for output."""
    if not auth_config:
        return auth_config
    return {k: (REDACTED if k in SECRET_AUTH_KEYS and v else v) for k, v in auth_config.items()}


class ApiIntegrationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    base_url: BaseUrl
    auth_type: AuthType = "none"
    auth_config: dict[str, Any] = Field(default_factory=dict)
    headers: Headers = Field(default_factory=dict)
    timeout: int = Field(default=30000, ge=100, le=600000)
    retry_attempts: int = Field(default=3, ge=0, le=10)
    is_active: bool = True


class ApiIntegrationUpdate(PartialUpdate):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    base_url: BaseUrl | None = None
    auth_type: AuthType | None = None
    auth_config: dict[str, Any] | None = None
    headers: Headers | None = None
    timeout: int | None = Field(default=None, ge=100, le=600000)
    retry_attempts: int | None = Field(default=None, ge=0, le=10)
    is_active: bool | None = None


class ApiIntegrationOut(CamelModel):
    id: int
    name: str
    base_url: str
    auth_type: str
    auth_config: dict[str, Any] | None = None
    headers: dict[str, str] | None = None
    timeout: int | None = None
    retry_attempts: int | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @field_serializer("auth_config")
    def serialize_auth_config(self, value: dict[str, Any] | None) -> dict[str, Any] | None:
        return mask_auth_config(value)


class ApiCallRequest(CamelModel):
    """One invocation of a stored integration."""

    method: HttpMethod = "GET"
    endpoint: str = Field(default="", max_length=2048)
    body: dict[str, Any] | list[Any] | None = None
    headers: Headers = Field(default_factory=dict)
    workflow_instance_id: int | None = None
    task_id: int | None = None

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class ApiCallOut(CamelModel):
    id: int
    workflow_instance_id: int | None = None
    task_id: int | None = None
    integration_id: int
    method: str
    endpoint: str
    request_headers: dict[str, str] | None = None
    request_body: Any = None
    response_status: int | None = None
    response_headers: dict[str, str] | None = None
    response_body: Any = None
    error_message: str | None = None
    duration: int | None = None
    attempts: int | None = None
    status: str
    created_at: datetime
    completed_at: datetime | None = None
