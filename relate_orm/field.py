import datetime
from decimal import Decimal

SQL_TYPES = {
    int: "INTEGER",
    float: "REAL",
    str: "TEXT",
    bool: "INTEGER",
    datetime.datetime: "TEXT",
    Decimal: "REAL",
}

# bool before int: bool is an int subclass
TO_SQL = (
    (datetime.datetime, datetime.datetime.isoformat),
    (Decimal, float),
    (bool, int),
)

FROM_SQL = {
    datetime.datetime: datetime.datetime.fromisoformat,
    bool: bool,
    Decimal: lambda value: Decimal(str(value)),
}


class Field:
    def __init__(self, py_type, primary_key=False, nullable=True, default=None, column=None):
        self.py_type = py_type
        self.primary_key = primary_key
        self.nullable = nullable
        self.default = default
        self.column = column
        self.name = None
        self.entity_cls = None

    def __set_name__(self, owner, name):
        self.name = name

    @property
    def column_name(self):
        """Storage column, falls back to the attribute name."""
        return self.column or self.name

    @property
    def autoincrement(self):
        return self.primary_key and self.py_type is int

    def __get__(self, obj, owner):
        """Descriptor to return Column for class access, value for instance access."""
        if obj is None:
            # Post.AuthorId == 1 builds a Condition
            from .query import Column
            return Column(self.column_name)
        return obj.__dict__.get(self.name, self.default)

    def __set__(self, obj, value):
        """Set value on instance."""
        obj.__dict__[self.name] = value

    def sql_type(self):
        """SQLite column type for py_type, TEXT when unknown."""
        return SQL_TYPES.get(self.py_type, "TEXT")

    def python_to_sql(self, value):
        """Convert an attribute value to what sqlite3 stores."""
        if value is None:
            return None
        for py_type, convert in TO_SQL:
            if isinstance(value, py_type):
                return convert(value)
        return value

    def sql_to_python(self, value):
        """Convert a stored value back to py_type."""
        convert = FROM_SQL.get(self.py_type)
        if value is None or convert is None or isinstance(value, self.py_type):
            return value
        return convert(value)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}: {getattr(self.py_type, '__name__', self.py_type)}>"
