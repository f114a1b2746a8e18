"""
Member Resolver — Find the declared member a template name refers to.

Only members declared directly on the type are visible: own annotations
(dataclass fields, pydantic fields, annotated class attributes) and own
properties with an annotated getter. Inherited members are not searched
so lookup stays shallow and predictable.
"""

from __future__ import annotations

import functools
import inspect
import typing
from dataclasses import dataclass
from typing import Any, ClassVar

from stache.core.errors import ResolutionError
from stache.core.logging import LogChannel, get_logger

log = get_logger(LogChannel.RESOLVE)


@dataclass(frozen=True)
class Member:
    """A resolved member: its name, declared type and owner."""

    name: str
    declared_type: Any
    owner: Any

    def access_expression(self, enclosing: str) -> str:
        """Expression reading this member from the enclosing expression."""
        return f"{enclosing}.{self.name}"


def type_name(owner: Any) -> str:
    if isinstance(owner, type) and typing.get_origin(owner) is None:
        return owner.__qualname__
    return repr(owner)


def _getter_annotations(getter: Any) -> dict[str, Any]:
    return inspect.get_annotations(getter, eval_str=True)


class MemberResolver:
    """Resolve names against the direct members of data-model types."""

    def members(self, owner: Any) -> dict[str, Any]:
        """
        Direct members of a type mapped to their declared types.

        Raises:
            ResolutionError: If the type's annotations cannot be evaluated
        """
        if not isinstance(owner, type) or typing.get_origin(owner) is not None:
            return {}

        try:
            declared = dict(inspect.get_annotations(owner, eval_str=True))
            for name, attribute in vars(owner).items():
                if isinstance(attribute, property) and attribute.fget is not None:
                    declared[name] = _getter_annotations(attribute.fget).get("return", Any)
                elif isinstance(attribute, functools.cached_property):
                    declared[name] = _getter_annotations(attribute.func).get("return", Any)
        except Exception as exc:
            # String annotations may fail with any error when evaluated
            raise ResolutionError(
                f"Cannot evaluate annotations of {type_name(owner)}: {exc}",
                type_name=type_name(owner),
            ) from exc

        return {
            name: declared_type
            for name, declared_type in declared.items()
            if not name.startswith("_") and typing.get_origin(declared_type) is not ClassVar
            and declared_type is not ClassVar
        }

    def resolve(self, owner: Any, name: str) -> Member:
        """
        Find the member `name` declared directly on `owner`.

        Raises:
            ResolutionError: If no such member exists
        """
        members = self.members(owner)
        if name not in members:
            raise ResolutionError(
                f"Unknown member: {type_name(owner)} has no member named '{name}'",
                type_name=type_name(owner),
                member_name=name,
            )

        member = Member(name=name, declared_type=members[name], owner=owner)
        log.debug("member_resolved", owner=type_name(owner), member=name)
        return member


_default_resolver: MemberResolver | None = None


def get_resolver() -> MemberResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = MemberResolver()
    return _default_resolver
