"""Helpers, utilities, and other miscellaneous functions and classes."""

from __future__ import annotations

import functools
import sys
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass as _dtcls
from inspect import isabstract
from typing import (
    Any,
    Callable,
    Generic,
    MutableMapping,
    Protocol,
    TypeVar,
    cast,
    runtime_checkable,
)

from typing_extensions import Self, dataclass_transform


_dT = TypeVar("_dT")


@functools.wraps(_dtcls)
@dataclass_transform()
def slots_dataclass(*args: Any, **kwargs: Any) -> Callable[[_dT], _dT]:
    """Wrapper for dataclass decorator that adds slots if supported (py3.10+)."""
    if sys.version_info < (3, 10):
        kwargs.pop("slots", None)
    else:
        kwargs.setdefault("slots", True)
    return cast(Callable[[_dT], _dT], _dtcls(*args, **kwargs))


_ID = TypeVar("_ID")
_RT = TypeVar("_RT", bound="Registry")


class Registry(ABC, Generic[_ID, _RT]):
    """
    Abstract base class for registries of subclasses of a given class.

    A class declared with ``registry=True`` becomes the root of a new registry,
    keyed by the value of the class attribute named by ``registry_attr``.
    Every concrete subclass of the root is then registered automatically under
    the value of that attribute (which may be inherited from a base class),
    and can be retrieved through :meth:`get_class_for_<attr>`.

    Abstract subclasses (with ABC in their bases, or abstract methods) are not
    registered, only concrete ones are.
    """

    __registry__: MutableMapping[_ID, type[_RT]]
    __registry_attr_name__: str
    __registry_root__: type[Registry]

    @classmethod
    def is_abstract(cls) -> bool:
        """
        Check if the class is actually defined as abstract
        (i.e. has ABC in its bases, or abstract methods).
        """
        return isabstract(cls) or ABC in cls.__bases__

    def __init_subclass__(
        cls,
        *,
        registry: bool = False,
        registry_attr: str | None = None,
        **kwargs: Any,
    ):
        super().__init_subclass__(**kwargs)

        if registry:
            if not registry_attr:
                raise AttributeError(
                    f"No registry_attr specified for registry class {cls.__name__}"
                )
            cls.__registry__ = {}
            cls.__registry_attr_name__ = registry_attr
            cls.__registry_root__ = cls
            setattr(
                cls,
                f"get_class_for_{registry_attr.strip('_')}",
                cls.__registry_get_class_for__,
            )
            return

        registry_id: _ID | None
        try:
            registry_id = getattr(cls, cls.__registry_attr_name__)
        except AttributeError:
            # either not below a registry root yet, or no key defined
            registry_id = None
        if registry_id is None:
            if cls.is_abstract():
                return
            raise ValueError(
                f"Cannot register {cls.__name__} in {cls.__registry_root__.__name__}, "
                f"no {cls.__registry_attr_name__} defined"
            )

        conflict_cls: type[_RT] | None = cls.__registry__.get(registry_id)
        if conflict_cls is not None:
            cls_fullname = (cls.__module__, cls.__qualname__)
            conflict_fullname = (conflict_cls.__module__, conflict_cls.__qualname__)
            # the same class is re-created by dataclass(slots=True), that's not a conflict
            if cls_fullname != conflict_fullname:
                raise NameError(
                    f"More than one {cls.__registry_root__.__name__} subclass with "
                    f'the same {cls.__registry_attr_name__} "{registry_id}" defined: '
                    f"{conflict_cls.__name__} and {cls.__name__}"
                )
        cls.__registry__[registry_id] = cast("type[_RT]", cls)

    @classmethod
    def get_registry(cls) -> types.MappingProxyType[_ID, type[_RT]]:
        """Get a read-only view of the registry mapping."""
        return types.MappingProxyType(cls.__registry__)

    @classmethod
    def __registry_get_class_for__(cls, registry_id: _ID) -> type[_RT]:
        registered_cls: type[_RT] | None = cls.__registry__.get(registry_id)
        if registered_cls is None:
            raise KeyError(
                f"No registered {cls.__registry_root__.__name__} subclass found "
                f'for {cls.__registry_attr_name__} == "{registry_id}"'
            )
        return registered_cls


@runtime_checkable
class Parseable(Protocol):
    """Generic protocol for objects parseable from str."""

    @classmethod
    def parse(cls, raw_value: str) -> Self:
        """Parse a string value into an instance of this class."""


@runtime_checkable
class Serializable(Protocol):
    """Generic protocol for objects serializable to str."""

    @abstractmethod
    def serialize(self) -> str:
        """Serialize the object to a string."""


@runtime_checkable
class ParseableSerializable(Parseable, Serializable, Protocol):
    """Generic protocol for objects that are both parseable and serializable to str."""


@slots_dataclass(frozen=True)
class StrValueMixin:
    """Mixin for dataclasses that have a single verbatim string field."""

    value: str

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        return cls(value=raw_value)

    def serialize(self) -> str:  # noqa: D102
        return self.value
