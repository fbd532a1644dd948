from __future__ import annotations

import importlib.metadata as importlib_metadata
import warnings
from email.message import Message
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import toml


_DISTRIBUTION_NAME: str = "webrtcredux"

_Metadata = Union[Message, Mapping[str, Any], None]


def _load_metadata() -> _Metadata:
    try:
        return importlib_metadata.metadata(_DISTRIBUTION_NAME)  # type: ignore[return-value]
    except importlib_metadata.PackageNotFoundError:
        pass
    # running from a source checkout: read the project table from pyproject.toml
    pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        return toml.load(pyproject_path)
    warnings.warn(
        "Didn't find distinfo nor pyproject.toml for package metadata", stacklevel=1
    )
    return None


metadata: _Metadata = _load_metadata()


def get_metadata(distinfo_key: str, toml_path: Sequence[str | int]) -> Any:
    """
    Get a package metadata value.

    :param distinfo_key: the key to look up in the installed distribution metadata.
    :param toml_path: the path of keys / indices to follow in ``pyproject.toml``.
    :return: the metadata value, or None if not available.
    """
    if metadata is None:
        return None
    if isinstance(metadata, Message):
        return metadata.get(distinfo_key)
    value: Any = metadata
    try:
        for key in toml_path:
            value = value[key]
    except (KeyError, IndexError, TypeError):
        return None
    return value
