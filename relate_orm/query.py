from .key_words import get_column_name, get_table_reference


class Condition:
    """Represents a SQL condition with parameters."""
    def __init__(self, sql, params):
        self.sql = sql
        self.params = params

    def __and__(self, other):
        return and_(self, other)

    def __or__(self, other):
        return or_(self, other)

    def __repr__(self):
        return f"<Condition {self.sql} {self.params}>"


def and_(*conditions):
    """Conjoin conditions. Each operand is parenthesised."""
    if len(conditions) == 1:
        return conditions[0]
    return Condition(
        " AND ".join(f"({c.sql})" for c in conditions),
        [p for c in conditions for p in c.params],
    )


def or_(*conditions):
    """Disjoin conditions. Each operand is parenthesised."""
    if len(conditions) == 1:
        return conditions[0]
    return Condition(
        " OR ".join(f"({c.sql})" for c in conditions),
        [p for c in conditions for p in c.params],
    )


class Column:
    """Represents a database column for query building."""
    def __init__(self, name):
        self.name = name

    @property
    def sql(self):
        return get_column_name(self.name)

    def __eq__(self, other):
        if other is None:
            return self.is_null()
        return Condition(f"{self.sql} = ?", [other])

    def __ne__(self, other):
        if other is None:
            return self.is_not_null()
        return Condition(f"{self.sql} != ?", [other])

    def __lt__(self, other):
        return Condition(f"{self.sql} < ?", [other])

    def __le__(self, other):
        return Condition(f"{self.sql} <= ?", [other])

    def __gt__(self, other):
        return Condition(f"{self.sql} > ?", [other])

    def __ge__(self, other):
        return Condition(f"{self.sql} >= ?", [other])

    def like(self, pattern):
        """SQL LIKE operator."""
        return Condition(f"{self.sql} LIKE ?", [pattern])

    def in_(self, values):
        """SQL IN operator."""
        values = list(values)
        if not values:
            return Condition("1 = 0", [])  # Always false
        placeholders = ", ".join("?" * len(values))
        return Condition(f"{self.sql} IN ({placeholders})", values)

    def is_null(self):
        """SQL IS NULL."""
        return Condition(f"{self.sql} IS NULL", [])

    def is_not_null(self):
        """SQL IS NOT NULL."""
        return Condition(f"{self.sql} IS NOT NULL", [])

    def desc(self):
        """For ORDER BY DESC."""
        return f"{self.sql} DESC"

    def asc(self):
        """For ORDER BY ASC."""
        return f"{self.sql} ASC"

    def __str__(self):
        return self.sql


class Query:
    """SQLAlchemy-style async query builder."""
    def __init__(self, entity_cls):
        self.entity_cls = entity_cls
        self._filters = []
        self._params = []
        self._order_by = None
        self._limit_val = None
        self._schema = None
        self._schema_delimiter = "."

    def _column(self, attr_name):
        field = self.entity_cls._fields.get(attr_name)
        if field is None:
            raise AttributeError(f"{self.entity_cls.__name__} has no attribute '{attr_name}'")
        return Column(field.column_name)

    def filter(self, *conditions):
        """Add filter conditions using comparison operators.

        Example:
            await Post.query().filter(Post.published == True).all()
        """
        for condition in conditions:
            if isinstance(condition, Condition):
                self._filters.append(condition.sql)
                self._params.extend(condition.params)
            else:
                raise TypeError(f"Expected Condition, got {type(condition)}")
        return self

    def filter_by(self, **kwargs):
        """Simple equality filters using attribute names.

        Example:
            await Post.query().filter_by(published=True).all()
        """
        return self.filter(*(self._column(k) == v for k, v in kwargs.items()))

    def where(self, where):
        """Add a Condition or a dict of attribute equalities."""
        if isinstance(where, dict):
            return self.filter_by(**where)
        return self.filter(where)

    def order_by(self, *fields):
        """Order by one or more fields.

        Example:
            await Post.query().order_by(Post.created_at.desc()).all()
        """
        self._order_by = ", ".join(str(f) for f in fields)
        return self

    def limit(self, n):
        """Limit number of results. None removes the limit."""
        self._limit_val = n
        return self

    def schema(self, schema, delimiter="."):
        """Direct the query at another schema (attached database)."""
        self._schema = schema
        self._schema_delimiter = delimiter or "."
        return self

    def apply_scope(self, scope):
        """Apply a scope definition: a dict with optional where/limit/order_by."""
        if not scope:
            return self
        if scope.get("where") is not None:
            self.where(scope["where"])
        if scope.get("order_by"):
            self.order_by(*scope["order_by"])
        if scope.get("limit") is not None:
            self.limit(scope["limit"])
        return self

    @property
    def table_reference(self):
        return get_table_reference(self.entity_cls._table_name, self._schema, self._schema_delimiter)

    def _where_sql(self):
        if self._filters:
            return f" WHERE {' AND '.join(self._filters)}"
        return ""

    def to_sql(self):
        sql = f"SELECT * FROM {self.table_reference}{self._where_sql()}"

        if self._order_by:
            sql += f" ORDER BY {self._order_by}"

        if self._limit_val is not None:
            sql += f" LIMIT {int(self._limit_val)}"

        return sql, list(self._params)

    async def all(self, transaction=None, logging=None):
        """Execute query and return all results."""
        sql, params = self.to_sql()
        rows, description = await self.entity_cls._context.fetch_all(
            sql, params, transaction=transaction, logging=logging
        )
        return [self.entity_cls._from_row(row, description) for row in rows]

    async def first(self, transaction=None, logging=None):
        """Get first result or None."""
        results = await self.limit(1).all(transaction=transaction, logging=logging)
        return results[0] if results else None

    async def find_by_pk(self, value, transaction=None, logging=None):
        """Get the row whose primary key equals value, or None."""
        if value is None:
            return None
        return await self.filter_by(**{self.entity_cls._primary_key: value}).first(
            transaction=transaction, logging=logging
        )

    async def count(self, transaction=None, logging=None):
        """Count matching records."""
        sql = f"SELECT COUNT(*) FROM {self.table_reference}{self._where_sql()}"

        rows, _ = await self.entity_cls._context.fetch_all(
            sql, list(self._params), transaction=transaction, logging=logging
        )
        return rows[0][0]
