import copy
from logging import getLogger

import inflection

from .field import Field

logger = getLogger(__name__)


class EntityMeta(type):
    """Builds the attribute registry (``_fields``) of every entity class.

    The registry is owned by the class: associations only add to it through
    ``propose_attribute`` and then ask for ``refresh_attributes``.
    """
    registry = {}

    def __new__(meta, name, bases, attrs):
        inherited = {}
        accessors = {}
        associations = {}
        hooks = {"before_save": [], "after_save": []}
        for base in reversed(bases):
            # copies, so a subclass can rename columns without touching the base
            inherited.update({k: copy.copy(f) for k, f in getattr(base, "_fields", {}).items()})
            accessors.update(getattr(base, "_accessors", {}))
            associations.update(getattr(base, "_associations", {}))
            for event, funcs in getattr(base, "_hooks", {}).items():
                hooks[event].extend(f for f in funcs if f not in hooks[event])

        fields = {}
        for key, val in list(attrs.items()):
            if isinstance(val, Field):
                val.name = key
                fields[key] = val

        # A class declaring its own primary key drops the inherited one
        if any(f.primary_key for f in fields.values()):
            inherited = {k: f for k, f in inherited.items() if not f.primary_key}

        attrs["_fields"] = {**inherited, **fields}
        attrs["_accessors"] = accessors
        attrs["_associations"] = associations
        attrs["_hooks"] = hooks
        attrs.setdefault("_scopes", {})
        attrs.setdefault("_default_scope", None)

        cls = super().__new__(meta, name, bases, attrs)

        for f in cls._fields.values():
            f.entity_cls = cls

        if name != "Entity":
            EntityMeta.registry[name] = cls

        cls._table_name = attrs.get("_table_name") or name
        cls.refresh_attributes()

        return cls

    def refresh_attributes(cls):
        """Recompute the caches derived from ``_fields`` and install descriptors."""
        for name, f in cls._fields.items():
            f.name = name
            if f.column is None and cls._underscored:
                f.column = inflection.underscore(name)
            if cls.__dict__.get(name) is not f:
                setattr(cls, name, f)

        primary_keys = [name for name, f in cls._fields.items() if f.primary_key]
        cls._primary_key = primary_keys[0] if primary_keys else None
        cls._column_to_attr = {f.column_name: name for name, f in cls._fields.items()}

    def propose_attribute(cls, name, field):
        """Add field under name unless the registry already defines it.

        Returns True when the field was added, False when an existing
        definition was kept.
        """
        if name in cls._fields:
            logger.debug("%s keeps its own definition of '%s'", cls.__name__, name)
            return False
        field.name = name
        field.entity_cls = cls
        cls._fields[name] = field
        return True
