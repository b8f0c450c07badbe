from .field import Field
from .key_words import get_column_name


class ForeignKey(Field):
    """Column holding the key of a row in another table.

    Injected into the source entity by belongs-to associations. The
    constraint settings are filled in by
    ``associations.helpers.add_foreign_key_constraints``.
    """

    def __init__(self, py_type=int, nullable=True, default=None, column=None,
                 references=None, on_delete=None, on_update=None):
        """
        Args:
            py_type: Python type of the key, usually the target key's type
            nullable: Whether FK can be NULL
            column: Storage column name (defaults to the attribute name)
            references: (table_name, column) on the target, None for no constraint
            on_delete: Referential action, e.g. "SET NULL" or "CASCADE"
            on_update: Referential action, e.g. "CASCADE"
        """
        super().__init__(py_type, nullable=nullable, default=default, column=column)
        self.references = references
        self.on_delete = on_delete
        self.on_update = on_update

    def constraint_sql(self, column_name):
        if not self.references:
            return None
        table, colname = self.references
        sql = (f"FOREIGN KEY ({column_name}) "
               f"REFERENCES {get_column_name(table)}({get_column_name(colname)})")
        if self.on_delete:
            sql += f" ON DELETE {self.on_delete}"
        if self.on_update:
            sql += f" ON UPDATE {self.on_update}"
        return sql
