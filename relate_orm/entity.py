import inspect
from functools import partial

from .entity_meta import EntityMeta
from .errors import EntityStateError, ValidationError
from .field import Field
from .foreign_key import ForeignKey
from .key_words import get_column_name
from .query import Query


class Entity(metaclass=EntityMeta):
    id = Field(int, primary_key=True, nullable=False)
    _context = None
    _underscored = False

    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(self._fields)
        if unknown:
            raise TypeError(f"{type(self).__name__} has no attributes {sorted(unknown)}")
        for f in self._fields.values():
            setattr(self, f.name, kwargs.get(f.name, f.default))
        self._persisted = False

    def __getattr__(self, name):
        # Only reached when normal lookup fails: resolve association accessors
        accessors = type(self)._accessors
        if name in accessors:
            association, operation = accessors[name]
            return partial(getattr(association, operation), self)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __repr__(self):
        pk = self._primary_key
        return f"<{type(self).__name__}({pk}={getattr(self, pk, None)!r})>"

    @classmethod
    def query(cls):
        """Create a new query for this entity, with the default scope applied.

        Example:
            posts = await Post.query().filter(Post.published == True).all()
        """
        return Query(cls).apply_scope(cls._default_scope)

    @classmethod
    def unscoped(cls):
        """Query without the default scope."""
        return Query(cls)

    @classmethod
    def scope(cls, name):
        """Query with the named scope from ``_scopes`` instead of the default one."""
        if name not in cls._scopes:
            raise KeyError(f"Unknown scope '{name}' on {cls.__name__}")
        return Query(cls).apply_scope(cls._scopes[name])

    @classmethod
    async def get_by_id(cls, id):
        """Get entity by primary key."""
        return await cls.query().find_by_pk(id)

    @classmethod
    async def get_all(cls):
        """Get all entities."""
        return await cls.query().all()

    @classmethod
    async def create(cls, values=None, transaction=None, logging=None):
        """Build an instance from values and insert it."""
        obj = cls(**(values or {}))
        await obj.save(transaction=transaction, logging=logging)
        return obj

    @classmethod
    def belongs_to(cls, target, **options):
        """Declare that each instance of this entity references one target row.

        Injects the foreign key attribute(s) and registers the
        ``get<Name>``/``set<Name>``/``create<Name>`` accessors.

        Example:
            Post.belongs_to(Author)
            author = await post.getAuthor()
        """
        from .associations import BelongsTo

        association = BelongsTo(cls, target, **options)
        association.inject_attributes()
        association.mixin(cls)
        cls._associations[association.alias] = association
        return association

    @classmethod
    def add_hook(cls, event, hook):
        """Register hook(instance, options) for "before_save" or "after_save"."""
        if event not in cls._hooks:
            raise ValueError(f"Unknown hook event '{event}'")
        cls._hooks[event].append(hook)

    @classmethod
    def _from_row(cls, row, description):
        """Convert database row to entity instance."""
        obj = cls()
        for idx, col in enumerate(description):
            attr = cls._column_to_attr.get(col[0])
            if attr is not None:
                field = cls._fields[attr]
                setattr(obj, attr, field.sql_to_python(row[idx]))
        obj._persisted = True
        return obj

    @classmethod
    async def sync_schema(cls):
        """Create the table for this entity if it does not exist."""
        fields_sql = []
        fks_sql = []

        for f in cls._fields.values():
            name = get_column_name(f.column_name)
            col = f"{name} {f.sql_type()}"
            if f.primary_key:
                col += " PRIMARY KEY"
                if f.autoincrement:
                    col += " AUTOINCREMENT"
            if not f.nullable:
                col += " NOT NULL"

            if f.default is not None and isinstance(f.default, (bool, int, float)):
                col += f" DEFAULT {int(f.default) if isinstance(f.default, bool) else f.default}"
            fields_sql.append(col)

            if isinstance(f, ForeignKey):
                constraint = f.constraint_sql(name)
                if constraint:
                    fks_sql.append(constraint)

        sql = f"""
        CREATE TABLE IF NOT EXISTS {get_column_name(cls._table_name)} (
            {', '.join(fields_sql + fks_sql)}
        )
        """

        await cls._context.execute(sql)

    async def _run_hooks(self, event, options):
        for hook in self._hooks[event]:
            result = hook(self, options)
            if inspect.isawaitable(result):
                await result

    def validate(self, fields=None, allow_null=()):
        """Raise ValidationError for non-nullable fields holding None."""
        for f in self._fields.values():
            if fields is not None and f.name not in fields:
                continue
            if f.nullable or f.autoincrement or f.name in allow_null:
                continue
            if getattr(self, f.name) is None:
                raise ValidationError(
                    f"{type(self).__name__}.{f.name} cannot be null",
                    {"entity": type(self).__name__, "field": f.name},
                )

    async def insert(self, transaction=None, logging=None):
        """Insert this entity into the database."""
        columns = []
        values = []

        for f in self._fields.values():
            val = getattr(self, f.name)
            if f.autoincrement and val is None:
                continue
            columns.append(get_column_name(f.column_name))
            values.append(f.python_to_sql(val))

        placeholders = ", ".join("?" for _ in columns)
        sql = (f"INSERT INTO {get_column_name(self._table_name)} "
               f"({', '.join(columns)}) VALUES ({placeholders})")

        lastrowid = await self._context.execute(sql, values, transaction=transaction, logging=logging)
        pk_field = self._fields[self._primary_key]
        if pk_field.autoincrement and getattr(self, self._primary_key) is None:
            setattr(self, self._primary_key, lastrowid)
        self._persisted = True

    async def update(self, fields=None, transaction=None, logging=None):
        """Update this entity in the database, optionally only the given fields."""
        pk = getattr(self, self._primary_key)
        if not self._persisted or pk is None:
            raise EntityStateError("Cannot update entity that was never inserted. Use insert() for new entities.")

        assignments = []
        values = []

        for f in self._fields.values():
            if f.primary_key:
                continue
            if fields is not None and f.name not in fields:
                continue
            assignments.append(f"{get_column_name(f.column_name)} = ?")
            values.append(f.python_to_sql(getattr(self, f.name)))

        if not assignments:
            return

        values.append(pk)
        pk_column = get_column_name(self._fields[self._primary_key].column_name)
        sql = (f"UPDATE {get_column_name(self._table_name)} "
               f"SET {', '.join(assignments)} WHERE {pk_column} = ?")

        await self._context.execute(sql, values, transaction=transaction, logging=logging)

    async def save(self, fields=None, allow_null=(), association=False, hooks=True,
                   transaction=None, logging=None):
        """Insert or update based on whether the entity was persisted.

        Args:
            fields: Restrict validation and UPDATE to these attributes; an
                INSERT writes and validates every attribute
            allow_null: Attributes allowed to be None even if non-nullable
            association: Marks saves issued by association setters, visible to hooks
            hooks: Run before_save/after_save hooks
        """
        options = {
            "fields": fields,
            "association": association,
            "transaction": transaction,
        }
        if hooks:
            await self._run_hooks("before_save", options)

        # an insert writes every column, so every field is checked
        self.validate(fields if self._persisted else None, allow_null)
        if self._persisted:
            await self.update(fields, transaction=transaction, logging=logging)
        else:
            await self.insert(transaction=transaction, logging=logging)

        if hooks:
            await self._run_hooks("after_save", options)
        return self

    async def delete(self, transaction=None, logging=None):
        """Delete this entity from the database."""
        pk = getattr(self, self._primary_key)
        if pk is None:
            raise EntityStateError("Cannot delete entity without a primary key.")

        pk_column = get_column_name(self._fields[self._primary_key].column_name)
        sql = f"DELETE FROM {get_column_name(self._table_name)} WHERE {pk_column} = ?"

        await self._context.execute(sql, (pk,), transaction=transaction, logging=logging)
        self._persisted = False
