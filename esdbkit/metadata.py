"""Stream metadata and access control lists, with their JSON form."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import timedelta

from .types import SYSTEM_STREAM_ACL, USER_STREAM_ACL

_ACL_KEYS = {
    "$r": "read_roles",
    "$w": "write_roles",
    "$d": "delete_roles",
    "$mr": "meta_read_roles",
    "$mw": "meta_write_roles",
}

_DEFAULT_ACLS = (USER_STREAM_ACL, SYSTEM_STREAM_ACL)


def _flatten_roles(props: dict, key: str, roles: list[str]) -> None:
    if not roles:
        return
    props[key] = roles[0] if len(roles) == 1 else list(roles)


def _collect_roles(value: object) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(role, str) for role in value):
        return list(value)
    raise ValueError(f"invalid acl role value: {value!r}")


def _as_uint(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float) and math.isfinite(value) and value >= 0:
        return int(value)
    return None


@dataclass
class Acl:
    """Access control list of a stream."""

    read_roles: list[str] = field(default_factory=list)
    write_roles: list[str] = field(default_factory=list)
    delete_roles: list[str] = field(default_factory=list)
    meta_read_roles: list[str] = field(default_factory=list)
    meta_write_roles: list[str] = field(default_factory=list)

    def add_read_roles(self, *args: str) -> None:
        """Add read roles."""
        self.read_roles.extend(args)

    def add_write_roles(self, *args: str) -> None:
        """Add write roles."""
        self.write_roles.extend(args)

    def add_delete_roles(self, *args: str) -> None:
        """Add delete roles."""
        self.delete_roles.extend(args)

    def add_meta_read_roles(self, *args: str) -> None:
        """Add metadata read roles."""
        self.meta_read_roles.extend(args)

    def add_meta_write_roles(self, *args: str) -> None:
        """Add metadata write roles."""
        self.meta_write_roles.extend(args)

    def to_dict(self) -> dict:
        """Return the ACL as its metadata mapping; single roles are flattened to strings."""
        props: dict = {}
        for key, attribute in _ACL_KEYS.items():
            _flatten_roles(props, key, getattr(self, attribute))
        return props

    @classmethod
    def from_dict(cls, props: dict) -> Acl:
        """Build an ACL from its metadata mapping."""
        fields = {}
        for key, value in props.items():
            attribute = _ACL_KEYS.get(key)
            if attribute is None:
                raise ValueError(f"unknown acl key: {key}")
            fields[attribute] = _collect_roles(value)
        return cls(**fields)


@dataclass
class StreamMetadata:
    """Stream metadata: typed system values plus custom properties."""

    max_count: int | None = None
    max_age: timedelta | None = None
    truncate_before: int | None = None
    cache_control: timedelta | None = None
    acl: str | Acl | None = None
    custom_properties: dict[str, object] = field(default_factory=dict)

    def add_custom_property(self, name: str, value: object) -> None:
        """Set a user-provided metadata property."""
        self.custom_properties[name] = value

    def stream_acl(self) -> Acl | None:
        """The ACL when it is an explicit role list, otherwise None."""
        return self.acl if isinstance(self.acl, Acl) else None

    def is_user_stream_acl(self) -> bool:
        """Whether the ACL is the default users ACL."""
        return isinstance(self.acl, str) and self.acl == USER_STREAM_ACL

    def is_system_stream_acl(self) -> bool:
        """Whether the ACL is the default system ACL."""
        return isinstance(self.acl, str) and self.acl == SYSTEM_STREAM_ACL

    def to_dict(self) -> dict:
        """Return the metadata as a mapping ready for JSON."""
        props: dict = {}
        if self.max_count is not None:
            props["$maxCount"] = self.max_count
        if self.max_age is not None:
            props["$maxAge"] = int(self.max_age.total_seconds())
        if self.truncate_before is not None:
            props["$tb"] = self.truncate_before
        if self.cache_control is not None:
            props["$cacheControl"] = int(self.cache_control.total_seconds())

        if isinstance(self.acl, str):
            if self.acl not in _DEFAULT_ACLS:
                raise ValueError(f"unsupported acl string value: {self.acl}")
            props["$acl"] = self.acl
        elif isinstance(self.acl, Acl):
            props["$acl"] = self.acl.to_dict()

        for key, value in self.custom_properties.items():
            # Keys starting with '$' could clash with system metadata names.
            if key.startswith("$"):
                continue
            props[key] = value
        return props

    def to_json(self) -> bytes:
        """Serialize the metadata to JSON bytes."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, props: dict) -> StreamMetadata:
        """Build metadata from a decoded JSON mapping."""
        meta = cls()
        for key, value in props.items():
            if key == "$maxCount":
                number = _as_uint(value)
                if number is None:
                    raise ValueError(f"invalid $maxCount value: {value!r}")
                meta.max_count = number
            elif key == "$maxAge":
                number = _as_uint(value)
                if number is None:
                    raise ValueError(f"invalid $maxAge value: {value!r}")
                meta.max_age = timedelta(seconds=number)
            elif key == "$tb":
                number = _as_uint(value)
                if number is None:
                    raise ValueError(f"invalid $tb value: {value!r}")
                meta.truncate_before = number
            elif key == "$cacheControl":
                number = _as_uint(value)
                if number is None:
                    raise ValueError(f"invalid $cacheControl value: {value!r}")
                meta.cache_control = timedelta(seconds=number)
            elif key == "$acl":
                if isinstance(value, str):
                    if value not in _DEFAULT_ACLS:
                        raise ValueError(f"invalid string $acl value: {value}")
                    meta.acl = value
                elif isinstance(value, dict):
                    meta.acl = Acl.from_dict(value)
                else:
                    raise ValueError(f"invalid $acl object value: {value!r}")
            else:
                meta.add_custom_property(key, value)
        return meta


def stream_metadata_from_json(data: bytes | str) -> StreamMetadata:
    """Deserialize JSON into StreamMetadata."""
    props = json.loads(data)
    if props is None:
        return StreamMetadata()
    if not isinstance(props, dict):
        raise ValueError("stream metadata must be a JSON object")
    return StreamMetadata.from_dict(props)