class Transaction:
    """An open connection whose statements commit or roll back together.

    Obtained from ``db_context.transaction()``; pass it as ``transaction=`` to
    queries, ``save`` and association accessors to run them on this
    connection.
    """

    def __init__(self, connection):
        self.connection = connection
        self.finished = None

    async def commit(self):
        await self.connection.commit()
        self.finished = "commit"

    async def rollback(self):
        await self.connection.rollback()
        self.finished = "rollback"

    def __repr__(self):
        state = self.finished or "open"
        return f"<Transaction {state}>"
