"""Package metadata lookup, from the installed distribution or the source pyproject.toml."""

from __future__ import annotations

import importlib.metadata as importlib_metadata
import warnings
from email.message import Message
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import toml


def _load_metadata() -> Message | Mapping[str, Any] | None:
    try:
        return importlib_metadata.metadata(__package__ or __name__)
    except importlib_metadata.PackageNotFoundError:
        pass
    # running from a source checkout
    package_path = Path(__file__).resolve().parent
    for candidate in (package_path.parent / "pyproject.toml", package_path / "pyproject.toml"):
        if candidate.exists():
            return toml.load(candidate)
    warnings.warn("Didn't find distinfo nor pyproject.toml for package metadata", stacklevel=2)
    return None


metadata: Message | Mapping[str, Any] | None = _load_metadata()


def get_metadata(
    distinfo_key: str,
    toml_getter: str | int | Sequence[str | int] | Callable[[Mapping[str, Any]], Any],
) -> Any:
    """
    Get a metadata value of the package.

    :param distinfo_key: the key in the installed distribution metadata.
    :param toml_getter: the key, keys path, or getter function for the pyproject.toml data.
    :return: the value, or None if not found.
    """
    if metadata is None:
        return None
    if isinstance(metadata, Message):
        return metadata.get(distinfo_key)
    try:
        if callable(toml_getter):
            return toml_getter(metadata)
        if isinstance(toml_getter, (list, tuple)):
            value: Any = metadata
            for key in toml_getter:
                value = value[key]
            return value
        return metadata[toml_getter]  # type: ignore[index]
    except (KeyError, IndexError, TypeError):
        return None
