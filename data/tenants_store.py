from __future__ import annotations

import json
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Literal, Mapping, Optional

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from core.errors import (
    InvalidTenantConfigError,
    MalformedConfigError,
    MissingConfigError,
)


class BehaviorType(str, Enum):
    ECHO = "echo"
    BYPASS = "bypass"
    PERIODIC_SUMMARY = "periodicsummary"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "BehaviorType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.UNKNOWN


class TenantConfig(BaseModel):
    """One callback channel. JSON keys follow the CALLBACK_CONFIGS format."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    behavior_type: BehaviorType = Field(default=BehaviorType.UNKNOWN, alias="Type")
    channel_secret: str = Field(alias="CHANNEL_SECRET", min_length=1)
    channel_access_token: str = Field(alias="CHANNEL_ACCESS_TOKEN", min_length=1)
    api_url: str | None = Field(default=None, alias="API_URL")
    api_auth_token: str | None = Field(default=None, alias="API_AUTH_TOKEN")
    auth_scheme: Literal["raw", "bearer"] = Field(default="raw", alias="AUTH_SCHEME")
    command_prefix: str | None = Field(default=None, alias="COMMAND_PREFIX")

    @field_validator("behavior_type", mode="before")
    @classmethod
    def _coerce_behavior(cls, v):
        # unrecognised types are kept as UNKNOWN and ignored at dispatch
        return BehaviorType.parse(v)

    @field_validator("auth_scheme", mode="before")
    @classmethod
    def _normalize_scheme(cls, v):
        return (v or "raw").strip().lower() if isinstance(v, str) else v

    @field_validator("command_prefix", mode="before")
    @classmethod
    def _empty_prefix_is_none(cls, v):
        return v or None

    @model_validator(mode="after")
    def _bypass_requires_url(self):
        if self.behavior_type is not BehaviorType.BYPASS:
            return self
        if not (self.api_url or "").strip():
            raise ValueError("API_URL is required for bypass tenants")
        try:
            url = httpx.URL(self.api_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"API_URL is not a valid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("API_URL must be an absolute http(s) URL")
        return self


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def load_tenants(raw: str | bytes | Mapping[str, Any] | None) -> dict[str, TenantConfig]:
    """
    Parse the tenants blob into name -> TenantConfig.
    Raises MissingConfigError, MalformedConfigError or InvalidTenantConfigError.
    """
    if raw is None:
        raise MissingConfigError("CALLBACK_CONFIGS is not set")

    if isinstance(raw, Mapping):
        data: Any = raw
    else:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if not raw.strip():
            raise MissingConfigError("CALLBACK_CONFIGS is empty")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedConfigError(f"error parsing CALLBACK_CONFIGS: {e}") from e

    if not isinstance(data, Mapping):
        raise MalformedConfigError("CALLBACK_CONFIGS must be a JSON object")

    tenants: dict[str, TenantConfig] = {}
    for name, entry in data.items():
        if not isinstance(entry, Mapping):
            raise MalformedConfigError(f"config for tenant {name!r} must be an object")
        try:
            tenants[str(name)] = TenantConfig.model_validate(dict(entry))
        except ValidationError as e:
            raise InvalidTenantConfigError(str(name), _describe(e)) from e
    return tenants


class TenantsStore:
    """Read-only view over the tenants loaded at startup."""

    def __init__(self, tenants: Mapping[str, TenantConfig]):
        self._by_name: Mapping[str, TenantConfig] = MappingProxyType(dict(tenants))

    @classmethod
    def from_json(cls, raw: str | bytes | Mapping[str, Any] | None) -> "TenantsStore":
        return cls(load_tenants(raw))

    @classmethod
    def from_settings(cls, settings) -> "TenantsStore":
        raw = settings.CALLBACK_CONFIGS
        if not (raw or "").strip() and settings.CALLBACK_CONFIGS_FILE:
            try:
                with open(settings.CALLBACK_CONFIGS_FILE, "r", encoding="utf-8") as f:
                    raw = f.read()
            except OSError as e:
                raise MissingConfigError(
                    f"cannot read CALLBACK_CONFIGS_FILE {settings.CALLBACK_CONFIGS_FILE}: {e}"
                ) from e
        return cls.from_json(raw)

    def get(self, name: str) -> Optional[TenantConfig]:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return list(self._by_name.keys())

    def items(self):
        return self._by_name.items()

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)
