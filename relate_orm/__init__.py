# relate_orm/__init__.py

from .entity import Entity
from .field import Field
from .foreign_key import ForeignKey
from .db_context import db_context
from .query import Query, Column, Condition, and_, or_
from .table import table
from .transaction import Transaction
from .key_words import get_column_name, reverse_column_name
from .associations import BelongsTo, KeyDescriptor
from .errors import (
    OrmError,
    AssociationError,
    CompositeKeyArityError,
    MissingTargetKeyError,
    NamingCollisionError,
    ValidationError,
    EntityStateError,
)

__version__ = "0.1.0"

__all__ = [
    'Entity',
    'Field',
    'ForeignKey',
    'db_context',
    'Query',
    'Column',
    'Condition',
    'and_',
    'or_',
    'table',
    'Transaction',
    'get_column_name',
    'reverse_column_name',
    'BelongsTo',
    'KeyDescriptor',
    'OrmError',
    'AssociationError',
    'CompositeKeyArityError',
    'MissingTargetKeyError',
    'NamingCollisionError',
    'ValidationError',
    'EntityStateError',
]
