"""Wire records for the provisioning API.

Records are frozen dataclasses. ``from_dict`` accepts the camelCase JSON the
server returns and raises ``ValueError`` when a required field is missing or
has the wrong type. ``to_dict`` is sparse: a field that is ``None`` is left
out of the payload instead of being sent as ``null``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _wire_value(val: Any) -> Any:
    if hasattr(val, "to_dict"):
        return val.to_dict()
    if isinstance(val, datetime):
        return val.isoformat().replace("+00:00", "Z")
    if isinstance(val, (list, tuple)):
        return [_wire_value(v) for v in val]
    return val


def _sparse_dict(record: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(record):
        val = getattr(record, f.name)
        if val is None:
            continue
        out[_camel(f.name)] = _wire_value(val)
    return out


def _require_obj(obj: Any, *, label: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ValueError(f"invalid {label}: expected JSON object")
    return obj


def _missing(obj: dict[str, Any], key: str, label: str) -> None:
    if obj.get(key) is None:
        raise ValueError(f"invalid {label}: missing {key!r}")


def _int(obj: dict[str, Any], key: str, label: str) -> int:
    _missing(obj, key, label)
    return _opt_int(obj, key, label)  # type: ignore[return-value]


def _opt_int(obj: dict[str, Any], key: str, label: str) -> int | None:
    val = obj.get(key)
    if val is None:
        return None
    if isinstance(val, bool) or not isinstance(val, int):
        raise ValueError(f"invalid {label}: {key!r} must be an integer")
    return val


def _str(obj: dict[str, Any], key: str, label: str) -> str:
    _missing(obj, key, label)
    return _opt_str(obj, key, label)  # type: ignore[return-value]


def _opt_str(obj: dict[str, Any], key: str, label: str) -> str | None:
    val = obj.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise ValueError(f"invalid {label}: {key!r} must be a string")
    return val


def _bool(obj: dict[str, Any], key: str, label: str) -> bool:
    _missing(obj, key, label)
    return _opt_bool(obj, key, label)  # type: ignore[return-value]


def _opt_bool(obj: dict[str, Any], key: str, label: str) -> bool | None:
    val = obj.get(key)
    if val is None:
        return None
    if not isinstance(val, bool):
        raise ValueError(f"invalid {label}: {key!r} must be a boolean")
    return val


def _parse_iso8601(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _datetime(obj: dict[str, Any], key: str, label: str) -> datetime:
    _missing(obj, key, label)
    return _opt_datetime(obj, key, label)  # type: ignore[return-value]


def _opt_datetime(obj: dict[str, Any], key: str, label: str) -> datetime | None:
    raw = _opt_str(obj, key, label)
    if raw is None:
        return None
    try:
        return _parse_iso8601(raw)
    except ValueError as e:
        raise ValueError(f"invalid {label}: {key!r} is not an ISO-8601 timestamp") from e


def _items(obj: dict[str, Any], label: str) -> list[Any]:
    items = obj.get("items")
    if not isinstance(items, list):
        raise ValueError(f"invalid {label}: 'items' must be a list")
    return items


@dataclass(frozen=True)
class Range:
    offset: int
    limit: int
    total: int

    @classmethod
    def from_dict(cls, obj: Any) -> Range:
        o = _require_obj(obj, label="range")
        return cls(
            offset=_int(o, "offset", "range"),
            limit=_int(o, "limit", "range"),
            total=_int(o, "total", "range"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class ErrorResponse:
    """Standard error body returned with every non-2xx response."""

    code: int
    message: str
    debug_info: str | None = None
    error_code: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> ErrorResponse:
        o = _require_obj(obj, label="error response")
        return cls(
            code=_int(o, "code", "error response"),
            message=_str(o, "message", "error response"),
            debug_info=_opt_str(o, "debugInfo", "error response"),
            error_code=_opt_int(o, "errorCode", "error response"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class KeyValueEntry:
    key: str
    value: str

    @classmethod
    def from_dict(cls, obj: Any) -> KeyValueEntry:
        o = _require_obj(obj, label="attribute")
        return cls(key=_str(o, "key", "attribute"), value=_str(o, "value", "attribute"))

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class CustomerAttributes:
    items: tuple[KeyValueEntry, ...] = ()

    def add_attribute(self, key: str, value: str) -> CustomerAttributes:
        return CustomerAttributes(items=self.items + (KeyValueEntry(key=key, value=value),))

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> CustomerAttributes:
        attribs = cls()
        for key, value in pairs:
            attribs = attribs.add_attribute(key, value)
        return attribs

    @classmethod
    def from_dict(cls, obj: Any) -> CustomerAttributes:
        o = _require_obj(obj, label="customer attributes")
        return cls(items=tuple(KeyValueEntry.from_dict(i) for i in _items(o, "customer attributes")))

    def to_dict(self) -> dict[str, Any]:
        return {"items": [i.to_dict() for i in self.items]}


def _opt_attributes(obj: dict[str, Any]) -> CustomerAttributes | None:
    raw = obj.get("customerAttributes")
    if raw is None:
        return None
    return CustomerAttributes.from_dict(raw)


@dataclass(frozen=True)
class Customer:
    id: int
    company_name: str
    customer_contract_type: str
    quota_max: int
    quota_used: int
    user_max: int
    user_used: int
    created_at: datetime
    updated_at: datetime | None = None
    last_login_at: datetime | None = None
    trial_days_left: int | None = None
    is_locked: bool | None = None
    customer_uuid: str | None = None
    customer_attributes: CustomerAttributes | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> Customer:
        label = "customer"
        o = _require_obj(obj, label=label)
        return cls(
            id=_int(o, "id", label),
            company_name=_str(o, "companyName", label),
            customer_contract_type=_str(o, "customerContractType", label),
            quota_max=_int(o, "quotaMax", label),
            quota_used=_int(o, "quotaUsed", label),
            user_max=_int(o, "userMax", label),
            user_used=_int(o, "userUsed", label),
            created_at=_datetime(o, "createdAt", label),
            updated_at=_opt_datetime(o, "updatedAt", label),
            last_login_at=_opt_datetime(o, "lastLoginAt", label),
            trial_days_left=_opt_int(o, "trialDaysLeft", label),
            is_locked=_opt_bool(o, "isLocked", label),
            customer_uuid=_opt_str(o, "customerUuid", label),
            customer_attributes=_opt_attributes(o),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class UserAuthData:
    method: str = "basic"
    login: str | None = None
    password: str | None = None
    must_change_password: bool | None = None
    ad_config_id: int | None = None
    oid_config_id: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> UserAuthData:
        label = "authData"
        o = _require_obj(obj, label=label)
        return cls(
            method=_str(o, "method", label),
            login=_opt_str(o, "login", label),
            password=_opt_str(o, "password", label),
            must_change_password=_opt_bool(o, "mustChangePassword", label),
            ad_config_id=_opt_int(o, "adConfigId", label),
            oid_config_id=_opt_int(o, "oidConfigId", label),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class FirstAdminUser:
    first_name: str
    last_name: str
    user_name: str | None = None
    auth_data: UserAuthData | None = None
    receiver_language: str | None = None
    notify_user: bool | None = None
    email: str | None = None
    phone: str | None = None

    @classmethod
    def new_local(
        cls,
        *,
        first_name: str,
        last_name: str,
        email: str,
        user_name: str | None = None,
        receiver_language: str | None = None,
        notify_user: bool | None = None,
    ) -> FirstAdminUser:
        """Basic-auth admin that must change the password on first login."""
        return cls(
            first_name=first_name,
            last_name=last_name,
            user_name=user_name or email,
            auth_data=UserAuthData(method="basic", must_change_password=True),
            receiver_language=receiver_language,
            notify_user=notify_user,
            email=email,
        )

    @classmethod
    def from_dict(cls, obj: Any) -> FirstAdminUser:
        label = "firstAdminUser"
        o = _require_obj(obj, label=label)
        auth_raw = o.get("authData")
        return cls(
            first_name=_str(o, "firstName", label),
            last_name=_str(o, "lastName", label),
            user_name=_opt_str(o, "userName", label),
            auth_data=UserAuthData.from_dict(auth_raw) if auth_raw is not None else None,
            receiver_language=_opt_str(o, "receiverLanguage", label),
            notify_user=_opt_bool(o, "notifyUser", label),
            email=_opt_str(o, "email", label),
            phone=_opt_str(o, "phone", label),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class NewCustomerRequest:
    customer_contract_type: str
    quota_max: int
    user_max: int
    first_admin_user: FirstAdminUser
    company_name: str | None = None
    trial_days: int | None = None
    is_locked: bool | None = None
    customer_attributes: CustomerAttributes | None = None
    provider_customer_id: str | None = None
    webhooks_max: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> NewCustomerRequest:
        label = "new customer"
        o = _require_obj(obj, label=label)
        _missing(o, "firstAdminUser", label)
        return cls(
            customer_contract_type=_str(o, "customerContractType", label),
            quota_max=_int(o, "quotaMax", label),
            user_max=_int(o, "userMax", label),
            first_admin_user=FirstAdminUser.from_dict(o["firstAdminUser"]),
            company_name=_opt_str(o, "companyName", label),
            trial_days=_opt_int(o, "trialDays", label),
            is_locked=_opt_bool(o, "isLocked", label),
            customer_attributes=_opt_attributes(o),
            provider_customer_id=_opt_str(o, "providerCustomerId", label),
            webhooks_max=_opt_int(o, "webhooksMax", label),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class NewCustomerResponse:
    id: int
    company_name: str
    customer_contract_type: str
    quota_max: int
    user_max: int
    first_admin_user: FirstAdminUser
    customer_uuid: str | None = None
    is_locked: bool | None = None
    trial_days: int | None = None
    created_at: datetime | None = None
    customer_attributes: CustomerAttributes | None = None
    provider_customer_id: str | None = None
    webhooks_max: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> NewCustomerResponse:
        label = "new customer response"
        o = _require_obj(obj, label=label)
        _missing(o, "firstAdminUser", label)
        return cls(
            id=_int(o, "id", label),
            company_name=_str(o, "companyName", label),
            customer_contract_type=_str(o, "customerContractType", label),
            quota_max=_int(o, "quotaMax", label),
            user_max=_int(o, "userMax", label),
            first_admin_user=FirstAdminUser.from_dict(o["firstAdminUser"]),
            customer_uuid=_opt_str(o, "customerUuid", label),
            is_locked=_opt_bool(o, "isLocked", label),
            trial_days=_opt_int(o, "trialDays", label),
            created_at=_opt_datetime(o, "createdAt", label),
            customer_attributes=_opt_attributes(o),
            provider_customer_id=_opt_str(o, "providerCustomerId", label),
            webhooks_max=_opt_int(o, "webhooksMax", label),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class UpdateCustomerRequest:
    """Only the fields that are set are changed server-side."""

    company_name: str | None = None
    customer_contract_type: str | None = None
    quota_max: int | None = None
    user_max: int | None = None
    is_locked: bool | None = None
    provider_customer_id: str | None = None
    webhooks_max: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class UpdateCustomerResponse:
    id: int
    company_name: str
    customer_contract_type: str
    quota_max: int
    user_max: int
    customer_uuid: str | None = None
    is_locked: bool | None = None
    trial_days: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer_attributes: CustomerAttributes | None = None
    provider_customer_id: str | None = None
    webhooks_max: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> UpdateCustomerResponse:
        label = "update customer response"
        o = _require_obj(obj, label=label)
        return cls(
            id=_int(o, "id", label),
            company_name=_str(o, "companyName", label),
            customer_contract_type=_str(o, "customerContractType", label),
            quota_max=_int(o, "quotaMax", label),
            user_max=_int(o, "userMax", label),
            customer_uuid=_opt_str(o, "customerUuid", label),
            is_locked=_opt_bool(o, "isLocked", label),
            trial_days=_opt_int(o, "trialDays", label),
            created_at=_opt_datetime(o, "createdAt", label),
            updated_at=_opt_datetime(o, "updatedAt", label),
            customer_attributes=_opt_attributes(o),
            provider_customer_id=_opt_str(o, "providerCustomerId", label),
            webhooks_max=_opt_int(o, "webhooksMax", label),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class UserItem:
    id: int
    first_name: str
    last_name: str
    user_name: str
    is_locked: bool
    avatar_uuid: str | None = None
    email: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    expire_at: datetime | None = None
    last_login_success_at: datetime | None = None
    is_encryption_enabled: bool | None = None
    home_room_id: int | None = None
    user_roles: dict[str, Any] | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, obj: Any) -> UserItem:
        label = "user"
        o = _require_obj(obj, label=label)
        roles = o.get("userRoles")
        if roles is not None and not isinstance(roles, dict):
            raise ValueError("invalid user: 'userRoles' must be an object")
        return cls(
            id=_int(o, "id", label),
            first_name=_str(o, "firstName", label),
            last_name=_str(o, "lastName", label),
            user_name=_str(o, "userName", label),
            is_locked=_bool(o, "isLocked", label),
            avatar_uuid=_opt_str(o, "avatarUuid", label),
            email=_opt_str(o, "email", label),
            phone=_opt_str(o, "phone", label),
            created_at=_opt_datetime(o, "createdAt", label),
            expire_at=_opt_datetime(o, "expireAt", label),
            last_login_success_at=_opt_datetime(o, "lastLoginSuccessAt", label),
            is_encryption_enabled=_opt_bool(o, "isEncryptionEnabled", label),
            home_room_id=_opt_int(o, "homeRoomId", label),
            user_roles=roles,
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class CustomerList:
    range: Range
    items: tuple[Customer, ...]

    @classmethod
    def from_dict(cls, obj: Any) -> CustomerList:
        o = _require_obj(obj, label="customer list")
        return cls(
            range=Range.from_dict(o.get("range")),
            items=tuple(Customer.from_dict(i) for i in _items(o, "customer list")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class AttributeList:
    range: Range
    items: tuple[KeyValueEntry, ...]

    @classmethod
    def from_dict(cls, obj: Any) -> AttributeList:
        o = _require_obj(obj, label="attribute list")
        return cls(
            range=Range.from_dict(o.get("range")),
            items=tuple(KeyValueEntry.from_dict(i) for i in _items(o, "attribute list")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)


@dataclass(frozen=True)
class UserList:
    range: Range
    items: tuple[UserItem, ...]

    @classmethod
    def from_dict(cls, obj: Any) -> UserList:
        o = _require_obj(obj, label="user list")
        return cls(
            range=Range.from_dict(o.get("range")),
            items=tuple(UserItem.from_dict(i) for i in _items(o, "user list")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _sparse_dict(self)
