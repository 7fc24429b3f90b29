"""
Database stubs for handler tests

StubSession implements the DatabaseSession calls (execute_batch /
execute_query) and records every statement in call order; StubDatabase
stands in for DatabaseConnection.session().
"""


class StubSession:
    """
    DatabaseSession that records statements instead of running them.

    Args:
        fail_batch: Exception raised by execute_batch
        fail_query: Exception raised by execute_query
    """

    def __init__(self, fail_batch: Exception = None, fail_query: Exception = None):
        self.fail_batch = fail_batch
        self.fail_query = fail_query
        self.calls = []

    @property
    def statements(self):
        return [statement for _, statement in self.calls]

    async def execute_batch(self, statement: str) -> int:
        self.calls.append(("batch", statement))
        if self.fail_batch:
            raise self.fail_batch
        return -1

    async def execute_query(self, statement: str) -> list:
        self.calls.append(("query", statement))
        if self.fail_query:
            raise self.fail_query
        return []


class StubDatabase:
    """DatabaseConnection stand-in whose session() yields a StubSession"""

    def __init__(self, session: StubSession = None, fail_acquire: Exception = None):
        self.stub_session = session or StubSession()
        self.fail_acquire = fail_acquire
        self.sessions_opened = 0

    def session(self):
        db = self

        class _SessionContext:
            async def __aenter__(self):
                if db.fail_acquire:
                    raise db.fail_acquire
                db.sessions_opened += 1
                return db.stub_session

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                return False

        return _SessionContext()

