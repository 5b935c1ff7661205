"""Shared building blocks: dataclass and enum helpers, class registries, parsing mixins."""

from __future__ import annotations

import enum
import functools
import ipaddress
import logging
import re
import secrets
import string
import time
import types
import urllib.request
from abc import ABC
from dataclasses import dataclass as _dtcls
from inspect import isabstract
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterator,
    MutableMapping,
    Protocol,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    runtime_checkable,
)

from typing_extensions import Self, TypeAlias, dataclass_transform

from .constants import PUBLIC_IP_LOOKUP_TIMEOUT, PUBLIC_IP_RESOLVERS


_logger = logging.getLogger(__name__)


_dT = TypeVar("_dT")


@functools.wraps(_dtcls)
@dataclass_transform()
def slots_dataclass(*args: Any, **kwargs: Any) -> Callable[[_dT], _dT]:
    """Same as :func:`dataclasses.dataclass`, with ``slots=True`` unless told otherwise."""
    kwargs.setdefault("slots", True)
    return cast(Callable[[_dT], _dT], _dtcls(*args, **kwargs))


# noinspection PyTypeChecker
class SDPEnum(enum.Enum):
    """
    String enum for SDP tokens, with case-insensitive lookup.

    Members values are the canonical strings of the tokens. Lookup by value
    ignores case. Enums with ``__allow_unknown__`` set return an ``UNKNOWN``
    pseudo-member wrapping the original string (case preserved) on a miss,
    the others raise :class:`ValueError` like a regular enum.

    Equality and hashing use the lower-cased string value, so a known member
    compares equal to an unknown pseudo-member holding the same token.
    """

    __allow_unknown__: ClassVar[bool] = False
    __unknown_member_name__: ClassVar[str] = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: Any) -> SDPEnum | None:
        if not isinstance(value, str):
            return None
        lowered = value.lower()
        for member in cls:
            if member._value_.lower() == lowered:
                return member
        if not cls.__allow_unknown__:
            return None
        return cls._new_unknown(value)

    @classmethod
    def _new_unknown(cls, value: str) -> Self:
        obj = object.__new__(cls)
        obj._value_ = value
        obj._name_ = cls.__unknown_member_name__
        return obj

    @classmethod
    def unknown(cls, value: str) -> Self:
        """Build an unknown pseudo-member for the given raw token, bypassing lookup."""
        if not cls.__allow_unknown__:
            raise TypeError(f"{cls.__name__} does not allow unknown values")
        return cls._new_unknown(value)

    @property
    def is_unknown(self) -> bool:
        """Whether this is an unknown pseudo-member."""
        return self._name_ == self.__unknown_member_name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return bool(self._value_.lower() == other._value_.lower())

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self._value_.lower()))

    def __str__(self) -> str:
        return str(self._value_)


def try_unpack_optional_type(typ_: Any) -> Any:
    """Return ``X`` for an ``Optional[X]`` or ``X | None`` annotation, else the annotation."""
    if get_origin(typ_) not in (Union, types.UnionType):
        return typ_
    args = get_args(typ_)
    if len(args) != 2 or type(None) not in args:
        return typ_
    return args[0] if args[1] is type(None) else args[1]


class _DefaultType:
    """Sentinel type for the catch-all registry key."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _DefaultType)

    def __hash__(self) -> int:
        return hash(_DefaultType)

    def __repr__(self) -> str:
        return "DEFAULT"


DEFAULT = _DefaultType()
DefaultType: TypeAlias = _DefaultType


_KT = TypeVar("_KT")
_RT = TypeVar("_RT", bound="Registry")


class Registry(ABC, Generic[_KT, _RT]):
    """
    Base class for classes that keep track of their concrete subclasses.

    A class declared with ``registry=True, registry_attr="<attr>"`` becomes the root
    of a new registry. Every subclass defining ``<attr>`` (directly or by inheritance)
    is then recorded in the root's ``__registry__`` under that value, and can be
    looked up with :meth:`__registry_get_class_for__`.
    Subclasses without a key are skipped if abstract, rejected otherwise.
    """

    __registry__: MutableMapping[_KT, type[_RT]]
    __registry_attr_name__: str
    __registry_root__: type[Registry]

    @classmethod
    def is_abstract(cls) -> bool:
        """Whether the class has abstract methods or directly derives from ABC."""
        return isabstract(cls) or ABC in cls.__bases__

    # pylint: disable=arguments-differ
    def __init_subclass__(
        cls, *, registry: bool = False, registry_attr: str | None = None, **kwargs: Any
    ):
        super().__init_subclass__(**kwargs)

        if registry:
            if not registry_attr:
                raise AttributeError(f"Registry class {cls.__name__} needs a registry_attr")
            cls.__registry__ = {}
            cls.__registry_attr_name__ = registry_attr
            cls.__registry_root__ = cls
            return

        attr_name: str | None = getattr(cls, "__registry_attr_name__", None)
        key = getattr(cls, attr_name, None) if attr_name is not None else None
        if key is None:
            if cls.is_abstract():
                return
            raise ValueError(f"{cls.__name__} is concrete but defines no registry key")

        registered = cls.__registry__.get(key)
        # slots dataclasses recreate the class, with the same qualified name
        if registered is not None and (registered.__module__, registered.__qualname__) != (
            cls.__module__,
            cls.__qualname__,
        ):
            raise NameError(
                f"{registered.__name__} and {cls.__name__} are both registered "
                f"in {cls.__registry_root__.__name__} as {key!r}"
            )
        cls.__registry__[key] = cls

    @classmethod
    def __registry_get_class_for__(cls, key: _KT) -> type[_RT]:
        try:
            return cls.__registry__[key]
        except KeyError:
            raise KeyError(
                f"Nothing registered in {cls.__registry_root__.__name__} for {key!r}"
            ) from None


@runtime_checkable
class Parseable(Protocol):
    """Objects that can be built from their string form."""

    @classmethod
    def parse(cls, raw_value: str) -> Self:
        """Parse a string value into an instance of this class."""


@runtime_checkable
class Serializable(Protocol):
    """Objects that can be written back to their string form."""

    def serialize(self) -> str:
        """Serialize the object to a string."""


@runtime_checkable
class ParseableSerializable(Parseable, Serializable, Protocol):
    """Objects that are both :class:`Parseable` and :class:`Serializable`."""


@runtime_checkable
class SerializableRaw(Protocol):
    """Objects that serialize to bytes, like whole SDP documents."""

    def serialize(self) -> bytes:
        """Serialize the object to bytes."""


@runtime_checkable
class FieldsParser(Protocol):
    """Classes that split a raw value into keyword arguments for their constructor."""

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:
        """Parse a string value into a mapping of fields values."""


class FieldsParserSerializer(FieldsParser, Serializable, Protocol):
    """A :class:`FieldsParser` that also serializes back."""


@slots_dataclass
class StrValueMixin(FieldsParserSerializer):
    """Dataclass mixin for values kept as a single string."""

    value: str

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return {"value": raw_value}

    def serialize(self) -> str:  # noqa: D102
        return self.value


@slots_dataclass
class OptionalStrValueMixin(FieldsParserSerializer):
    """Like :class:`StrValueMixin`, but the value may be missing."""

    value: str | None

    @classmethod
    def parse_raw_value(cls, raw_value: str | None) -> dict[str, Any]:  # noqa: D102
        return {"value": raw_value}

    def serialize(self) -> str | None:  # noqa: D102
        return self.value


@slots_dataclass
class IntValueMixin(FieldsParserSerializer):
    """Dataclass mixin for values kept as a single non-negative integer."""

    value: int

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return {"value": parse_int(raw_value)}

    def serialize(self) -> str:  # noqa: D102
        return str(self.value)

    def __int__(self) -> int:
        return self.value


_VT = TypeVar("_VT")


@slots_dataclass
class ListValueMixin(FieldsParserSerializer, Generic[_VT]):
    """
    Dataclass mixin for values made of space separated tokens.

    Each token is converted with ``_values_type``, and iterating over the
    instance yields the converted values.
    """

    _values_type: ClassVar[Callable[[str], Any]]
    _separator: ClassVar[str] = " "

    values: list[_VT]

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        tokens = raw_value.split(cls._separator) if raw_value else []
        return {"values": [cls._values_type(token) for token in tokens]}

    def serialize(self) -> str:  # noqa: D102
        return self._separator.join(str(value) for value in self.values)

    def __iter__(self) -> Iterator[_VT]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> _VT:
        return self.values[index]


_INT_RE = re.compile(r"-?[0-9]+")


def parse_int(raw_value: str, *, min_value: int | None = 0, max_value: int | None = None) -> int:
    """
    Strictly parse a decimal integer token, optionally checking its range.

    Unlike :func:`int`, surrounding whitespace, signs other than a leading ``-``,
    and underscores are rejected.

    :raises ValueError: if the token is not a valid integer or is out of range.
    """
    if not _INT_RE.fullmatch(raw_value):
        raise ValueError(f"Invalid integer {raw_value!r}")
    value = int(raw_value)
    if min_value is not None and value < min_value:
        raise ValueError(f"Integer {value} is below {min_value}")
    if max_value is not None and value > max_value:
        raise ValueError(f"Integer {value} is above {max_value}")
    return value


def random_token(length: int, alphabet: str = string.ascii_letters + string.digits) -> str:
    """Generate a random string of the given length, alphanumeric by default."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


_rT = TypeVar("_rT")


def expiring_cache(seconds: float) -> Callable[[Callable[[], _rT]], Callable[[], _rT]]:
    """Remember the result of a no-arguments function for the given number of seconds."""

    def decorator(func: Callable[[], _rT]) -> Callable[[], _rT]:
        entry: list[tuple[float, _rT]] = []

        @functools.wraps(func)
        def wrapped() -> _rT:
            now = time.monotonic()
            if not entry or now - entry[0][0] > seconds:
                entry[:] = [(now, func())]
            return entry[0][1]

        wrapped.cache_clear = entry.clear  # type: ignore[attr-defined]
        return wrapped

    return decorator


@expiring_cache(60.0)
def get_public_ip() -> str:
    """
    Look up the public IP address of this machine, to advertise as ICE host candidate.

    The resolvers in :data:`~rtcsdp.constants.PUBLIC_IP_RESOLVERS` are tried in order.

    :raises RuntimeError: if none of them returned a valid address.
    """
    for url, extract in PUBLIC_IP_RESOLVERS:
        try:
            with urllib.request.urlopen(url, timeout=PUBLIC_IP_LOOKUP_TIMEOUT) as response:  # noqa: S310
                body: str | None = response.read().decode("utf-8")
            if extract is not None and body is not None:
                body = extract(body)
            if not body:
                raise ValueError("no address in response")
            return str(ipaddress.ip_address(body.strip()))
        except (OSError, ValueError) as e:  # noqa: PERF203
            _logger.warning(f"Public IP lookup through {url} failed: {e}")
    raise RuntimeError("Could not resolve the public IP address")
