"""Normalization of foreign_key / target_key association options.

``resolve_keys`` turns the user supplied options into two positionally
paired sequences: foreign key descriptors living on the source entity and
target key attribute names on the target entity.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

import inflection

from ..errors import AssociationError, CompositeKeyArityError


@dataclass(frozen=True)
class KeyDescriptor:
    """A foreign key attribute as requested by the association options."""
    name: str | None = None
    type: Any = None
    allow_null: bool | None = None
    column: str | None = None
    default: Any = None
    on_delete: str | None = None
    on_update: str | None = None

    @classmethod
    def coerce(cls, value) -> KeyDescriptor:
        if isinstance(value, KeyDescriptor):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, str):
            return cls(name=value)
        raise AssociationError(f"Invalid foreign key descriptor: {value!r}")


@dataclass(frozen=True)
class ResolvedKeys:
    foreign_keys: tuple[KeyDescriptor, ...]
    target_keys: tuple[str, ...]
    identifier_fields: tuple[str, ...] = field(default=())
    single_primary_target_key: str | None = None

    @property
    def foreign_key_names(self) -> tuple[str, ...]:
        return tuple(fk.name for fk in self.foreign_keys)


def _is_list(value) -> bool:
    return isinstance(value, (list, tuple))


def default_foreign_key_name(source, target, alias: str) -> str:
    """'Author' + 'id' -> 'AuthorId', or 'author_id' for underscored sources."""
    if source._underscored:
        return "_".join([inflection.underscore(alias), target._primary_key])
    name = "_".join([alias, target._primary_key])
    # the first character keeps its case
    return inflection.camelize(name, uppercase_first_letter=name[:1].isupper())


def resolve_keys(source, target, alias: str, foreign_key=None, target_key=None) -> ResolvedKeys:
    if (_is_list(foreign_key) or _is_list(target_key)) and (
        not _is_list(foreign_key)
        or not _is_list(target_key)
        or len(foreign_key) != len(target_key)
    ):
        raise CompositeKeyArityError(foreign_key, target_key)

    if _is_list(foreign_key):
        foreign_keys = tuple(KeyDescriptor.coerce(fk) for fk in foreign_key)
        unnamed = [i for i, fk in enumerate(foreign_keys) if not fk.name]
        if unnamed:
            raise AssociationError(
                "Composite foreign key descriptors must be named",
                {"positions": unnamed},
            )
    elif foreign_key:
        descriptor = KeyDescriptor.coerce(foreign_key)
        if not descriptor.name:
            descriptor = replace(descriptor, name=default_foreign_key_name(source, target, alias))
        foreign_keys = (descriptor,)
    else:
        foreign_keys = (KeyDescriptor(name=default_foreign_key_name(source, target, alias)),)

    if _is_list(target_key):
        target_keys = tuple(target_key)
    else:
        target_keys = (target_key or target._primary_key,)

    identifier_fields = tuple(
        source._fields[fk.name].column_name
        for fk in foreign_keys
        if fk.name in source._fields
    )

    single_primary_target_key = None
    if len(target_keys) == 1 and target_keys[0] == target._primary_key:
        single_primary_target_key = foreign_keys[0].name

    return ResolvedKeys(
        foreign_keys=foreign_keys,
        target_keys=target_keys,
        identifier_fields=identifier_fields,
        single_primary_target_key=single_primary_target_key,
    )
