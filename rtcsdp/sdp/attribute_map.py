"""Ordered multimap of SDP attributes, as found in session and media sections."""

from __future__ import annotations

from typing import Iterable, Iterator, TypeVar

from rtcsdp.constants import SDP_LINE_TERMINATOR
from rtcsdp.helpers import DEFAULT

from .attributes import SDPAttribute


__all__ = [
    "AttributeMap",
]


_AT = TypeVar("_AT", bound=SDPAttribute)


class AttributeMap:
    """
    Ordered collection of SDP attributes, keyed by their lower-cased name.

    Multiple attributes with the same name are kept, in insertion order.
    Iterating yields ``(name, attribute)`` pairs.
    """

    __slots__ = ("_entries",)

    def __init__(self, attributes: Iterable[SDPAttribute] = ()):
        self._entries: list[tuple[str, SDPAttribute]] = []
        for attribute in attributes:
            self.append(attribute)

    def append(self, attribute: SDPAttribute) -> None:
        """Add an attribute at the end of the map."""
        self._entries.append((attribute.name.lower(), attribute))

    def extend(self, attributes: Iterable[SDPAttribute]) -> None:
        """Add multiple attributes at the end of the map."""
        for attribute in attributes:
            self.append(attribute)

    def append_raw(self, name: str, value: str | None = None) -> SDPAttribute:
        """
        Parse and add an attribute from its name and raw value.

        The name is dispatched through the attributes registry, unregistered
        names are kept as :class:`~rtcsdp.sdp.attributes.UnknownAttribute`.

        :return: the parsed attribute.
        :raises SDPParseError: if the value is malformed for a registered attribute.
        """
        attribute = SDPAttribute.from_name_value(name, value)
        self.append(attribute)
        return attribute

    @staticmethod
    def _registered_name(attribute_cls: type[SDPAttribute]) -> str:
        name = attribute_cls._name  # noqa: SLF001
        if name is DEFAULT or not isinstance(name, str):
            raise TypeError(f"{attribute_cls.__name__} is not registered under a name")
        return name

    def get(self, attribute_cls: type[_AT]) -> _AT | None:
        """
        Get the first attribute stored under the name of the given class.

        Returns None if there is none, or if the first one is not an instance of the class.
        """
        name = self._registered_name(attribute_cls)
        for entry_name, attribute in self._entries:
            if entry_name == name:
                return attribute if isinstance(attribute, attribute_cls) else None
        return None

    def get_all(self, attribute_cls: type[_AT]) -> list[_AT]:
        """Get all the attributes of the given class, in order."""
        name = self._registered_name(attribute_cls)
        return [
            attribute
            for entry_name, attribute in self._entries
            if entry_name == name and isinstance(attribute, attribute_cls)
        ]

    def get_raw(self, name: str, default: str | None = None) -> str | None:
        """
        Get the serialized value of the first attribute with the given name.

        Flag attributes have no value, and return None: use ``name in attributes``
        to check whether an attribute is present.
        """
        name = name.lower()
        for entry_name, attribute in self._entries:
            if entry_name == name:
                return attribute.serialize()
        return default

    def get_raw_all(self, name: str) -> list[str | None]:
        """Get the serialized values of all the attributes with the given name."""
        name = name.lower()
        return [
            attribute.serialize()
            for entry_name, attribute in self._entries
            if entry_name == name
        ]

    def remove_all(self, name: str) -> None:
        """Remove all the attributes with the given name."""
        name = name.lower()
        self._entries = [entry for entry in self._entries if entry[0] != name]

    def copy(self) -> AttributeMap:
        """Shallow copy of the map."""
        return AttributeMap(attribute for _, attribute in self._entries)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        name = name.lower()
        return any(entry_name == name for entry_name, _ in self._entries)

    def __iter__(self) -> Iterator[tuple[str, SDPAttribute]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeMap):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({[attribute for _, attribute in self._entries]!r})"

    def __str__(self) -> str:
        """Serialize the attributes as ``a=`` lines."""
        return "".join(
            f"a={attribute}{SDP_LINE_TERMINATOR}" for _, attribute in self._entries
        )
