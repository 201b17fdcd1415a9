"""
Request records for the steward actions.

Each action accepts either a bare target string (IP or username) or a mapping
overriding any subset of the defaults. from_input() folds both shapes into
one dataclass so the actions only ever deal with a complete record.
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

from stewardbot.constants import (
    DEFAULT_ANON_ONLY,
    DEFAULT_BLOCK_EXPIRY,
    DEFAULT_BLOCK_REASON,
    DEFAULT_HIDE_LEVEL,
    DEFAULT_LOCK_REASON,
    DEFAULT_UNBLOCK_REASON,
    FIELD_BLOCK_ADDRESS,
    FIELD_BLOCK_ANON_ONLY,
    FIELD_BLOCK_EXPIRY,
    FIELD_BLOCK_REASON,
    FIELD_HIDE_STATUS,
    FIELD_LOCK_REASON,
    FIELD_LOCK_STATUS,
    FIELD_UNBLOCK_ADDRESS,
    FIELD_UNBLOCK_REASON,
    USER_PREFIX_RE,
)


class _RequestMixin:
    # Name of the field a bare string fills in
    PRIMARY: ClassVar[str] = ""
    # Legacy mapping keys accepted for compatibility
    ALIASES: ClassVar[Dict[str, str]] = {}
    # Defaults for fields left as None, overridable per action
    DEFAULTS: ClassVar[Dict[str, Any]] = {}

    @classmethod
    def from_input(cls, value: Union[str, Mapping[str, Any], "_RequestMixin"], **defaults):
        """
        Build a request from a bare target, a mapping or an existing request.

        Fields given as None, in a mapping or on a request, fall back to the
        defaults. Keyword arguments replace the class defaults.

        Raises:
            TypeError: On an unsupported input type, an unknown key or a
                       missing target
        """
        defaults = {**cls.DEFAULTS, **defaults}
        if isinstance(value, str):
            return cls(**{**defaults, cls.PRIMARY: value})
        if isinstance(value, cls):
            given = {f.name: getattr(value, f.name) for f in fields(cls) if getattr(value, f.name) is not None}
        elif isinstance(value, Mapping):
            given = {cls.ALIASES.get(key, key): item for key, item in value.items() if item is not None}
            unknown = set(given) - {f.name for f in fields(cls)}
            if unknown:
                raise TypeError(f"Unknown {cls.__name__} option(s): {', '.join(sorted(unknown))}")
        else:
            raise TypeError(f"{cls.__name__} needs a string or a mapping, not {type(value).__name__}")

        if not given.get(cls.PRIMARY):
            raise TypeError(f"{cls.__name__} requires '{cls.PRIMARY}'")
        return cls(**{**defaults, **given})


@dataclass
class GlobalBlockRequest(_RequestMixin):
    """Options for placing a global block."""
    PRIMARY: ClassVar[str] = "ip"
    ALIASES: ClassVar[Dict[str, str]] = {"ao": "anon_only", "summary": "reason"}

    ip: str
    anon_only: bool = DEFAULT_ANON_ONLY
    reason: str = DEFAULT_BLOCK_REASON
    expiry: str = DEFAULT_BLOCK_EXPIRY

    def __post_init__(self):
        if not isinstance(self.ip, str):
            raise TypeError(f"ip must be a string, not {type(self.ip).__name__}")
        self.anon_only = bool(self.anon_only)

    def to_fields(self, address: str) -> Dict[str, Any]:
        return {
            FIELD_BLOCK_ADDRESS: address,
            FIELD_BLOCK_EXPIRY: self.expiry,
            FIELD_BLOCK_REASON: self.reason,
            FIELD_BLOCK_ANON_ONLY: self.anon_only,
        }


@dataclass
class GlobalUnblockRequest(_RequestMixin):
    """Options for lifting a global block."""
    PRIMARY: ClassVar[str] = "ip"
    ALIASES: ClassVar[Dict[str, str]] = {"summary": "reason"}

    ip: str
    reason: str = DEFAULT_UNBLOCK_REASON

    def __post_init__(self):
        if not isinstance(self.ip, str):
            raise TypeError(f"ip must be a string, not {type(self.ip).__name__}")

    def to_fields(self, address: str) -> Dict[str, Any]:
        return {
            FIELD_UNBLOCK_ADDRESS: address,
            FIELD_UNBLOCK_REASON: self.reason,
        }


@dataclass
class AccountLockRequest(_RequestMixin):
    """
    Options for a CentralAuth status change.

    Attributes:
        user: Account name, with or without a "User:" prefix
        lock: True to lock, False to unlock, None for the action's default
        hide: 0 (visible), 1 (hidden from lists) or 2 (suppressed)
        reason: Log reason, None for the action's default
    """
    PRIMARY: ClassVar[str] = "user"
    ALIASES: ClassVar[Dict[str, str]] = {"summary": "reason"}
    DEFAULTS: ClassVar[Dict[str, Any]] = {"lock": True, "reason": DEFAULT_LOCK_REASON}

    user: str
    lock: Optional[bool] = None
    hide: int = DEFAULT_HIDE_LEVEL
    reason: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.user, str):
            raise TypeError(f"user must be a string, not {type(self.user).__name__}")
        self.user = USER_PREFIX_RE.sub("", self.user.strip())
        if self.lock is not None:
            self.lock = bool(self.lock)
        try:
            self.hide = int(self.hide)
        except (TypeError, ValueError) as error:
            raise TypeError(f"hide must be 0, 1 or 2, not {self.hide!r}") from error

    @property
    def target(self) -> str:
        """Account name as used in the Special:CentralAuth URL."""
        return self.user.replace(" ", "_")

    def to_fields(self) -> Dict[str, Any]:
        lock = self.DEFAULTS["lock"] if self.lock is None else self.lock
        reason = self.DEFAULTS["reason"] if self.reason is None else self.reason
        return {
            FIELD_LOCK_STATUS: lock,
            FIELD_HIDE_STATUS: self.hide,
            FIELD_LOCK_REASON: reason,
        }


__all__ = [
    'GlobalBlockRequest',
    'GlobalUnblockRequest',
    'AccountLockRequest',
]
