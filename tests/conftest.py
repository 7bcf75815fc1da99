import pytest


class DriverError(Exception):
    """Stands in for a psycopg error: carries the server's SQLSTATE."""

    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def make_db_error(error_class, message, sqlstate=None):
    # Django re-raises driver errors with the original as __cause__.
    error = error_class(message)
    error.__cause__ = DriverError(message, sqlstate)
    return error


class FakeCursor:
    def __init__(self, alias, log, failures):
        self.alias = alias
        self.log = log
        self.failures = failures
        self.rowcount = -1

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def _maybe_fail(self, sql):
        for prefix, error in self.failures.items():
            if sql.startswith(prefix):
                raise error

    def execute(self, sql, params=None):
        self._maybe_fail(sql)
        self.log.append((self.alias, sql, params))
        # populate statements take the row count as their last parameter
        self.rowcount = params[-1] if params else -1

    def executemany(self, sql, rows):
        self._maybe_fail(sql)
        rows = list(rows)
        self.log.append((self.alias, sql, rows))
        self.rowcount = len(rows)


class FakeConnection:
    def __init__(self, alias, log, failures, name):
        self.alias = alias
        self.settings_dict = {'NAME': name}
        self.log = log
        self.failures = failures

    def cursor(self):
        return FakeCursor(self.alias, self.log, self.failures)


class FakeConnections:
    """Stands in for django.db.connections and records every statement."""

    def __init__(self):
        self.log = []
        self.failures = {}
        self.names = {'default': 'example', 'maintenance': 'postgres'}

    def __getitem__(self, alias):
        return FakeConnection(alias, self.log, self.failures, self.names[alias])

    def fail(self, prefix, error):
        self.failures[prefix] = error

    @property
    def statements(self):
        return [sql for _, sql, _ in self.log]


@pytest.fixture
def fake_connections(monkeypatch):
    fake = FakeConnections()
    monkeypatch.setattr('simpleschema.provisioner.connections', fake)
    return fake


@pytest.fixture
def db_error():
    return make_db_error
