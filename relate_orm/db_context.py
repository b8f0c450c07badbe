import os
from contextlib import asynccontextmanager
from logging import DEBUG, INFO, getLogger

import aiosqlite

from .entity_meta import EntityMeta
from .errors import EntityStateError
from .key_words import get_column_name, reverse_column_name
from .transaction import Transaction

logger = getLogger(__name__)


class db_context:

    def __init__(self, db_path, sync_schema=False, attach=None, foreign_keys=True):
        """
        Args:
            db_path: SQLite database file
            sync_schema: Create missing tables on initialize()
            attach: Mapping of schema name -> database file, attached to
                every connection so queries can target ``schema.table``
            foreign_keys: Enforce FOREIGN KEY constraints
        """
        self._db_path = db_path
        self._sync_schema = sync_schema
        self._attach = dict(attach or {})
        self._foreign_keys = foreign_keys

        for cls in EntityMeta.registry.values():
            cls._context = self

        for path in [db_path, *self._attach.values()]:
            dir = os.path.dirname(path)
            if dir and not os.path.exists(dir):
                os.makedirs(dir)

    async def initialize(self):
        if self._sync_schema:
            await self.sync_schema()

    async def _connect(self):
        conn = await aiosqlite.connect(self._db_path)
        if self._foreign_keys:
            await conn.execute("PRAGMA foreign_keys = ON")
        for schema, path in self._attach.items():
            await conn.execute(f"ATTACH DATABASE ? AS {get_column_name(schema)}", (path,))
        return conn

    @asynccontextmanager
    async def get_connection(self, transaction=None):
        """Yield the transaction's connection, or a fresh one committed on exit."""
        if transaction is not None:
            yield transaction.connection
            return

        conn = await self._connect()
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self):
        """Run statements on one connection, committing only if the block succeeds.

        Example:
            async with ctx.transaction() as t:
                author = await Author.create({"name": "Ann"}, transaction=t)
                await post.setAuthor(author, transaction=t)
        """
        conn = await self._connect()
        t = Transaction(conn)
        try:
            yield t
            if not t.finished:
                await t.commit()
        except Exception:
            if not t.finished:
                await t.rollback()
            raise
        finally:
            await conn.close()

    def _log_sql(self, sql, params, logging=None):
        """Log a statement. logging: callable receiving the SQL, True for INFO, False to mute."""
        if logging is False:
            return
        if callable(logging):
            logging(sql)
            return
        logger.log(INFO if logging else DEBUG, "%s %s", sql.strip(), params)

    async def fetch_all(self, sql, params=(), transaction=None, logging=None):
        async with self.get_connection(transaction) as conn:
            self._log_sql(sql, params, logging)
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return rows, cursor.description

    async def execute(self, sql, params=(), transaction=None, logging=None):
        """Run a statement and return the rowid of the last inserted row."""
        async with self.get_connection(transaction) as conn:
            self._log_sql(sql, params, logging)
            cursor = await conn.execute(sql, params)
            return cursor.lastrowid

    async def sync_schema(self):
        for cls in EntityMeta.registry.values():
            logger.info("Syncing schema for %s", cls.__name__)
            await cls.sync_schema()
        await self.seed_data()

    async def seed_data(self):
        """Override to insert initial rows after sync_schema."""

    async def insert_many(self, entities, transaction=None):
        if not entities:
            return

        grouped = {}
        for e in entities:
            grouped.setdefault(type(e), []).append(e)

        async with self.get_connection(transaction) as conn:
            for cls, items in grouped.items():
                fields = [
                    f for f in cls._fields.values()
                    if not f.autoincrement or any(getattr(o, f.name) is not None for o in items)
                ]
                columns = [get_column_name(f.column_name) for f in fields]

                placeholders = ", ".join("?" for _ in columns)
                sql = f"INSERT INTO {cls._table_name} ({', '.join(columns)}) VALUES ({placeholders})"

                rows = []
                for obj in items:
                    attrs = [cls._column_to_attr[reverse_column_name(c)] for c in columns]
                    rows.append([
                        obj._fields[a].python_to_sql(getattr(obj, a))
                        for a in attrs
                    ])

                self._log_sql(sql, rows)
                await conn.executemany(sql, rows)
                for obj in items:
                    obj._persisted = True

    async def update_many(self, entities, transaction=None):
        if not entities:
            return

        # Check all entities have primary keys
        for e in entities:
            if getattr(e, e._primary_key) is None:
                raise EntityStateError(f"Cannot update entity without a primary key: {e}")

        grouped = {}
        for e in entities:
            grouped.setdefault(type(e), []).append(e)

        async with self.get_connection(transaction) as conn:
            for cls, items in grouped.items():
                pk_field = cls._fields[cls._primary_key]
                fields = [f for f in cls._fields.values() if not f.primary_key]
                set_clause = ", ".join(f"{get_column_name(f.column_name)} = ?" for f in fields)
                sql = (f"UPDATE {cls._table_name} SET {set_clause} "
                       f"WHERE {get_column_name(pk_field.column_name)} = ?")

                rows = []
                for obj in items:
                    vals = [
                        f.python_to_sql(getattr(obj, f.name))
                        for f in fields
                    ]
                    vals.append(getattr(obj, cls._primary_key))  # pk for WHERE clause
                    rows.append(vals)

                self._log_sql(sql, rows)
                await conn.executemany(sql, rows)
