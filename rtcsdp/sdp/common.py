"""Common base classes for SDP sections and fields."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import InitVar, dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from typing_extensions import Self, override

from rtcsdp.constants import SDP_LINE_TERMINATOR
from rtcsdp.exceptions import SDPParseError, SDPUnknownFieldError
from rtcsdp.helpers import (
    FieldsParser,
    ParseableSerializable,
    Registry,
    SerializableRaw,
    StrValueMixin,
    parse_int,
    try_unpack_optional_type,
)

from .attribute_map import AttributeMap
from .attributes import SDPAttribute
from .enums import AddressType, BandwidthType, NetworkType


__all__ = [
    "SDPField",
    "SDPInformationField",
    "SDPConnectionField",
    "SDPBandwidthField",
    "SDPEncryptionField",
    "SDPAttributeField",
    "SDPSection",
    "split_lines",
]


_LINE_SPLIT_RE = re.compile(r"\r?\n")


def split_lines(raw_data: str | bytes) -> deque[tuple[int, str]]:
    """
    Split raw SDP data into numbered lines.

    Lines can be terminated by CRLF or bare LF, and the last line can be unterminated.
    Line numbers start from 1.

    :raises SDPParseError: on empty lines, or bytes that are not valid UTF-8.
    """
    if isinstance(raw_data, bytes):
        try:
            raw_data = raw_data.decode("utf-8")
        except UnicodeDecodeError as e:
            line_number = raw_data.count(b"\n", 0, e.start) + 1
            raise SDPParseError(f"Invalid UTF-8 data: {e.reason}", line_number=line_number) from e
    raw_lines = _LINE_SPLIT_RE.split(raw_data)
    if raw_lines and not raw_lines[-1]:
        raw_lines.pop()
    lines: deque[tuple[int, str]] = deque()
    for line_number, line in enumerate(raw_lines, start=1):
        if not line:
            raise SDPParseError("Empty line", line_number=line_number, line=line)
        lines.append((line_number, line))
    return lines


@dataclass
class SDPField(Registry[str, "SDPField"], ParseableSerializable, ABC):
    """
    Abstract base dataclass for the ``<type>=<value>`` lines of an SDP document.

    Concrete fields are registered by their single letter ``_type`` in the registry
    of the section they belong to, and must carry a ``_description``.
    """

    _type: ClassVar[str]
    _description: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.is_abstract() and not getattr(cls, "_description", None):
            raise ValueError(f"{cls.__name__} is missing a _description")

    @property
    def type(self) -> str:
        """The single letter type of the field."""
        return self._type

    @classmethod
    def parse(cls, raw_data: str) -> Self:  # noqa: D102
        field_type, sep, raw_value = raw_data.partition("=")
        if not sep or len(field_type) != 1:
            raise SDPParseError(f"Invalid SDP line {raw_data!r}")

        try:
            field_cls = cls.__registry_get_class_for__(field_type)
        except KeyError:
            raise SDPUnknownFieldError(f"Unknown SDP field type {field_type}")  # noqa: B904

        try:
            return cast(Self, field_cls.from_raw_value(field_type=field_type, raw_value=raw_value))
        except SDPParseError:
            raise
        except ValueError as e:
            raise SDPParseError(f"Invalid {field_type}= field: {e}") from e

    @classmethod
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        """Build the field from the part of the line after ``=``."""
        if issubclass(cls, FieldsParser):
            return cls(**cls.parse_raw_value(raw_value))
        raise NotImplementedError(f"{cls.__name__} cannot parse raw values")

    @abstractmethod
    def serialize(self) -> str:
        """The value of the field, as written after ``=``."""

    def __str__(self) -> str:
        return f"{self.type}={self.serialize()}"


def split_field_tokens(raw_value: str, count: int) -> list[str]:
    """Split a field value into exactly ``count`` space-separated, non-empty tokens."""
    tokens = raw_value.split(" ")
    if len(tokens) != count or not all(tokens):
        raise SDPParseError(f"Expected {count} space-separated values, got: {raw_value!r}")
    return tokens


@dataclass
class SDPInformationField(StrValueMixin, SDPField, ABC):
    """
    SDP session information field, defined in :rfc:`8866#section-5.4`.

    Spec::
        i=<session description>
    """

    _type = "i"

    @property
    def session_description(self) -> str:
        """The session description."""
        return self.value


@dataclass
class SDPConnectionField(SDPField, ABC):
    """
    SDP connection data field, defined in :rfc:`8866#section-5.7`.

    Spec::
        c=<nettype> <addrtype> <connection-address>

    The connection address is kept verbatim, including any multicast TTL
    or number of addresses suffixes.
    """

    _type = "c"

    nettype: NetworkType
    addrtype: AddressType
    address: str

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        nettype, addrtype, address = split_field_tokens(raw_value, 3)
        return cls(
            nettype=NetworkType(nettype),
            addrtype=AddressType(addrtype),
            address=address,
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.nettype} {self.addrtype} {self.address}"


@dataclass
class SDPBandwidthField(SDPField, ABC):
    """
    SDP bandwidth field, defined in :rfc:`8866#section-5.8`.

    Spec::
        b=<bwtype>:<bandwidth>

    Sections keep one bandwidth per type, a later line replaces an earlier one.
    """

    _type = "b"

    bwtype: BandwidthType
    bandwidth: int

    @property
    def key(self) -> BandwidthType:
        """The key of the field in the section bandwidths mapping."""
        return self.bwtype

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        bwtype, sep, bandwidth = raw_value.partition(":")
        if not sep or not bwtype:
            raise SDPParseError(f"Invalid bandwidth {raw_value!r}")
        return cls(bwtype=BandwidthType(bwtype), bandwidth=parse_int(bandwidth))

    def serialize(self) -> str:  # noqa: D102
        return f"{self.bwtype}:{self.bandwidth}"


@dataclass
class SDPEncryptionField(SDPField, ABC):
    """
    SDP encryption key field, defined in :rfc:`8866#section-5.12`.

    Spec::
        k=<method>
        k=<method>:<encryption key>
    """

    _type = "k"

    method: str
    key: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        method, sep, key = raw_value.partition(":")
        return cls(method=method, key=key if sep else None)

    def serialize(self) -> str:  # noqa: D102
        return f"{self.method}:{self.key}" if self.key is not None else self.method


@dataclass
class SDPAttributeField(SDPField, ABC):
    """
    SDP attribute field, defined in :rfc:`8866#section-5.13`.

    Spec::
        a=<attribute-name>
        a=<attribute-name>:<attribute-value>
    """

    _type = "a"

    attribute: SDPAttribute

    @property
    def name(self) -> str:
        """The name of the attribute."""
        return self.attribute.name

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        return cls(attribute=SDPAttribute.parse(raw_value))

    def serialize(self) -> str:  # noqa: D102
        return str(self.attribute)


@dataclass
class SDPSection(SerializableRaw, ABC):
    """
    Abstract base dataclass for SDP sections.

    Section fields are discovered from the dataclass annotations, and their
    declaration order is the order in which the fields must appear in the SDP.
    Fields annotated as lists can repeat, dicts keep one field per key,
    :class:`AttributeMap` collects the ``a=`` lines, and other sections are
    parsed as subsections starting at their start field.
    """

    _fields_base: ClassVar[type[SDPField]]
    _start_field: ClassVar[type[SDPField]]

    # {sdp type: (attribute name, annotation, field or section class)}, in declaration order
    _sdp_fields_map: ClassVar[dict[str, tuple[str, Any, type]]]
    _subsections_map: ClassVar[dict[str, type[SDPSection]]]

    @staticmethod
    def _item_type(annotation: Any) -> type:
        origin = get_origin(annotation)
        if origin in {list, List}:
            (annotation,) = get_args(annotation)
        elif origin in {dict, Dict}:
            _, annotation = get_args(annotation)
        annotation = try_unpack_optional_type(annotation)
        if not isinstance(annotation, type):
            raise TypeError(f"Unsupported SDP section annotation {annotation!r}")
        return annotation

    @classmethod
    def _build_fields_map(cls) -> None:
        cls._sdp_fields_map = {}
        cls._subsections_map = {}
        for name, annotation in get_type_hints(cls).items():
            if get_origin(annotation) is ClassVar or isinstance(annotation, InitVar):
                continue
            item_type = cls._item_type(annotation)
            if issubclass(item_type, AttributeMap):
                sdp_type = SDPAttributeField._type  # noqa: SLF001
            elif issubclass(item_type, SDPField):
                sdp_type = item_type._type  # noqa: SLF001
            elif issubclass(item_type, SDPSection):
                sdp_type = item_type._start_field._type  # noqa: SLF001
                cls._subsections_map[sdp_type] = item_type
            else:
                continue
            cls._sdp_fields_map[sdp_type] = name, annotation, item_type

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for required in ("_fields_base", "_start_field"):
            if not hasattr(cls, required):
                raise TypeError(f"{cls.__name__} must define {required}")
        cls._build_fields_map()

    @classmethod
    def _parse_line(cls, line_number: int, line: str) -> SDPField:
        try:
            return cls._fields_base.parse(line)
        except SDPParseError as e:
            if e.line_number is not None:
                raise
            raise SDPParseError(str(e), line_number=line_number, line=line) from e

    @classmethod
    def from_lines(cls, lines: deque[tuple[int, str]], *, is_subsection: bool = False) -> Self:
        """
        Parse an SDP section from a queue of numbered lines, consuming them.

        A subsection stops at the first line that does not belong to it (a new
        start field, an unknown field, or a field out of order), leaving it
        in the queue for the parent section.

        :param lines: the ``(line_number, line)`` pairs to parse.
        :param is_subsection: whether the section is a subsection of another section.
        :return: the parsed SDP section.
        """
        sdp_types: list[str] = list(cls._sdp_fields_map)
        start_type: str = cls._start_field._type  # noqa: SLF001
        fields: dict[str, Any] = {}
        last_index: int = -1
        line_number: int = 0

        while lines:
            line_number, line = lines[0]
            sdp_type, sep, _ = line.partition("=")
            if not sep or len(sdp_type) != 1:
                raise SDPParseError("Invalid SDP line", line_number=line_number, line=line)

            if not fields and sdp_type != start_type:
                raise SDPParseError(
                    f"Expected {start_type}= field first", line_number=line_number, line=line
                )

            mapped = cls._sdp_fields_map.get(sdp_type)
            if mapped is None:
                if is_subsection:
                    break
                raise SDPUnknownFieldError(
                    f"Unknown SDP field type {sdp_type}", line_number=line_number, line=line
                )
            field_name, field_type, wrapped_type = mapped
            index = sdp_types.index(sdp_type)
            is_repeated = get_origin(field_type) in {list, List, dict, Dict} or issubclass(
                wrapped_type, AttributeMap
            )
            if index < last_index or (index == last_index and not is_repeated):
                if is_subsection:
                    break
                raise SDPParseError(
                    f"Unexpected {sdp_type}= field", line_number=line_number, line=line
                )
            last_index = index

            value: SDPField | SDPSection
            if sdp_type in cls._subsections_map:
                value = cls._subsections_map[sdp_type].from_lines(lines, is_subsection=True)
            else:
                lines.popleft()
                value = cls._parse_line(line_number, line)

            if issubclass(wrapped_type, AttributeMap):
                assert isinstance(value, SDPAttributeField)
                fields.setdefault(field_name, AttributeMap()).append(value.attribute)
            elif get_origin(field_type) in {dict, Dict}:
                fields.setdefault(field_name, {})[getattr(value, "key")] = value
            elif get_origin(field_type) in {list, List}:
                fields.setdefault(field_name, []).append(value)
            else:
                fields[field_name] = value

        try:
            # noinspection PyArgumentList
            return cls(**fields)
        except TypeError as e:
            raise SDPParseError(
                f"Missing required fields in {cls.__name__}: {e}", line_number=line_number + 1
            ) from e
        except SDPParseError as e:
            if e.line_number is not None:
                raise
            raise SDPParseError(str(e), line_number=line_number + 1) from e

    @classmethod
    def parse(cls, raw_value: Union[str, bytes]) -> Self:
        """
        Parse an SDP section from a string (or UTF-8 encoded bytes).

        :raises SDPParseError: if the data is malformed, with the line number where it failed.
        """
        lines = split_lines(raw_value)
        if not lines:
            raise SDPParseError("Empty SDP", line_number=1)
        section = cls.from_lines(lines)
        if lines:
            line_number, line = lines[0]
            raise SDPParseError("Unexpected trailing field", line_number=line_number, line=line)
        return section

    def serialize(self) -> bytes:
        """Serialize the SDP section to bytes."""
        return str(self).encode("utf-8")

    def __str__(self) -> str:
        """Serialize the SDP section to a string, each line terminated by CRLF."""
        serialized: list[str] = []
        for field_name, field_type, wrapped_type in self._sdp_fields_map.values():
            value = getattr(self, field_name)
            if value is None:
                continue
            if issubclass(wrapped_type, AttributeMap):
                serialized.append(str(value))
            elif get_origin(field_type) in {dict, Dict}:
                serialized.extend(self._serialize_value(item) for item in value.values())
            elif get_origin(field_type) in {list, List}:
                serialized.extend(self._serialize_value(item) for item in value)
            else:
                serialized.append(self._serialize_value(value))
        return "".join(serialized)

    @staticmethod
    def _serialize_value(value: SDPField | SDPSection) -> str:
        if isinstance(value, SDPSection):
            return str(value)
        return f"{value}{SDP_LINE_TERMINATOR}"
