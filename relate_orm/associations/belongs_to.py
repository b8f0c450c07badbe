from logging import getLogger

from ..errors import AssociationError, MissingTargetKeyError
from ..foreign_key import ForeignKey
from ..query import Column
from . import helpers
from .base import Association
from .keys import resolve_keys

logger = getLogger(__name__)

UNSET = object()


class BelongsTo(Association):
    """Many-to-one association: the foreign key lives on the source entity.

    For ``Post.belongs_to(Author)`` the source ``Post`` gains an ``AuthorId``
    attribute and its instances the ``getAuthor``, ``setAuthor`` and
    ``createAuthor`` accessors.
    """
    association_type = "BelongsTo"
    is_single_association = True
    accessor_methods = ("get", "set", "create")

    def __init__(self, source, target, alias=None, foreign_key=None, target_key=None,
                 key_type=None, use_hooks=True, on_delete=None, on_update=None,
                 constraints=True):
        super().__init__(
            source, target, alias,
            foreign_key=foreign_key, target_key=target_key, key_type=key_type,
            use_hooks=use_hooks, on_delete=on_delete, on_update=on_update,
            constraints=constraints,
        )
        keys = resolve_keys(source, target, self.alias, foreign_key, target_key)

        self.foreign_keys = keys.foreign_keys
        self.target_keys = keys.target_keys
        self.identifier_fields = keys.identifier_fields
        self.single_primary_target_key = keys.single_primary_target_key
        self.key_type = key_type
        self.use_hooks = use_hooks

    @property
    def foreign_key_names(self):
        return tuple(fk.name for fk in self.foreign_keys)

    @property
    def is_composite(self):
        return len(self.foreign_keys) > 1

    # the key is in the source table
    def inject_attributes(self):
        target_fields = []
        for foreign_key, target_key in zip(self.foreign_keys, self.target_keys):
            target_field = self.target._fields.get(target_key)
            if target_field is None:
                raise MissingTargetKeyError(self.target.__name__, target_key, foreign_key.name)
            target_fields.append(target_field)

        new_attributes = {}
        for foreign_key, target_field in zip(self.foreign_keys, target_fields):
            new_attribute = ForeignKey(
                py_type=foreign_key.type or self.key_type or target_field.py_type,
                nullable=True if foreign_key.allow_null is None else foreign_key.allow_null,
                default=foreign_key.default,
                column=foreign_key.column,
                on_delete=foreign_key.on_delete,
                on_update=foreign_key.on_update,
            )
            helpers.add_foreign_key_constraints(
                new_attribute, self.target, self.source, self.options, target_field.column_name
            )
            new_attributes[foreign_key.name] = new_attribute

        for name, new_attribute in new_attributes.items():
            if self.source.propose_attribute(name, new_attribute):
                logger.debug("Injected %s.%s for %r", self.source.__name__, name, self)

        self.source.refresh_attributes()
        self.identifier_fields = tuple(
            self.source._fields[name].column_name for name in self.foreign_key_names
        )

        helpers.check_naming_collision(self)

        return self

    def mixin(self, entity_cls):
        helpers.mixin_methods(self, entity_cls, self.accessor_methods)

    def _target_query(self, scope, schema, schema_delimiter):
        if scope is UNSET:
            query = self.target.query()
        elif not scope:
            query = self.target.unscoped()
        else:
            query = self.target.scope(scope)

        if schema:
            query.schema(schema, schema_delimiter)
        return query

    def _key_of(self, instance, names):
        values = tuple(getattr(instance, name) for name in names)
        return values if self.is_composite else values[0]

    async def get(self, instances, scope=UNSET, schema=None, schema_delimiter=".",
                  where=None, limit=None, transaction=None, logging=None):
        """Get the associated instance.

        Passing a list of source instances loads all their targets with one
        query and returns a dict of foreign key value (a tuple for composite
        keys) -> target instance or None.

        Args:
            scope: Name of a target scope to apply, or a falsy value to drop
                the default scope
            schema: Query the target table in this schema
            where: Extra Condition or dict of equalities, ANDed with the key match
            limit: Row limit for batch loads
        """
        query = self._target_query(scope, schema, schema_delimiter)

        if isinstance(instances, (list, tuple)):
            return await self._get_many(query, instances, where, limit, transaction, logging)

        instance = instances
        if self.single_primary_target_key and where is None:
            return await query.find_by_pk(
                getattr(instance, self.single_primary_target_key),
                transaction=transaction, logging=logging,
            )

        query.filter(*(
            Column(self.target._fields[target_key].column_name) == getattr(instance, foreign_key.name)
            for foreign_key, target_key in zip(self.foreign_keys, self.target_keys)
        ))
        if where is not None:
            query.where(where)
        # a scope limit must not cut the single row lookup
        query.limit(None)

        return await query.first(transaction=transaction, logging=logging)

    async def _get_many(self, query, instances, where, limit, transaction, logging):
        for foreign_key, target_key in zip(self.foreign_keys, self.target_keys):
            values = {getattr(i, foreign_key.name) for i in instances} - {None}
            query.filter(Column(self.target._fields[target_key].column_name).in_(list(values)))
        if where is not None:
            query.where(where)
        if limit is not None:
            query.limit(limit)

        results = await query.all(transaction=transaction, logging=logging)
        logger.debug("Loaded %d %s rows for %d instances", len(results), self.target.__name__, len(instances))

        result = {self._key_of(i, self.foreign_key_names): None for i in instances}
        for target_instance in results:
            key = self._key_of(target_instance, self.target_keys)
            if key in result and result[key] is None:
                result[key] = target_instance
        return result

    def _key_values(self, key):
        if not self.is_composite:
            return (key,)
        if key is None:
            return (None,) * len(self.foreign_keys)
        if not isinstance(key, (list, tuple)) or len(key) != len(self.foreign_keys):
            raise AssociationError(
                f"{self!r} expects a key of {len(self.foreign_keys)} values",
                {"key": key},
            )
        return tuple(key)

    async def set(self, source_instance, associated=None, *, key=UNSET, save=True,
                  transaction=None, logging=None):
        """Set the associated instance.

        Args:
            associated: A target instance, or None to remove the association
            key: Raw target key value(s) to store instead of an instance;
                a tuple for composite keys
            save: Skip saving source_instance after assigning the key if False
        """
        if key is not UNSET:
            if associated is not None:
                raise ValueError("Pass either an associated instance or key=, not both")
            values = self._key_values(key)
        elif associated is None:
            values = (None,) * len(self.foreign_keys)
        elif isinstance(associated, self.target):
            values = tuple(getattr(associated, target_key) for target_key in self.target_keys)
        else:
            raise TypeError(
                f"{self.accessors['set']} expects a {self.target.__name__} instance or None, "
                f"got {type(associated).__name__}; pass raw keys with key="
            )

        for foreign_key, value in zip(self.foreign_keys, values):
            setattr(source_instance, foreign_key.name, value)

        if not save:
            return None

        # only the changed key columns get updated
        fields = list(self.foreign_key_names)
        return await source_instance.save(
            fields=fields,
            allow_null=fields,
            association=True,
            hooks=self.use_hooks,
            transaction=transaction,
            logging=logging,
        )

    async def create(self, source_instance, values=None, *, transaction=None, logging=None):
        """Create a new target instance and associate it with source_instance."""
        created = await self.target.create(values, transaction=transaction, logging=logging)
        setter = getattr(source_instance, self.accessors["set"])
        await setter(created, transaction=transaction, logging=logging)
        return created
