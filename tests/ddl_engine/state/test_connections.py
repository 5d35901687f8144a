import sqlite3

import pytest

from src.ddl_engine.state.connections import (
    DbApiMetadataConnection,
    SparkJdbcMetadataConnection,
    _inline_parameters,
    _rewrite_placeholders,
)

# ---------- placeholders ----------


@pytest.mark.parametrize(
    ("paramstyle", "expected"),
    [
        ("qmark", "SELECT * FROM t WHERE a = ? AND b LIKE 'x%'"),
        ("format", "SELECT * FROM t WHERE a = %s AND b LIKE 'x%%'"),
        ("pyformat", "SELECT * FROM t WHERE a = %s AND b LIKE 'x%%'"),
    ],
)
def test_rewrite_positional_placeholders(paramstyle, expected):
    assert _rewrite_placeholders("SELECT * FROM t WHERE a = ? AND b LIKE 'x%'", paramstyle) == expected


def test_rewrite_numbered_and_named_placeholders():
    sql = "SELECT * FROM t WHERE a = ? AND b = ?"
    assert _rewrite_placeholders(sql, "numeric") == "SELECT * FROM t WHERE a = :1 AND b = :2"
    assert _rewrite_placeholders(sql, "named") == "SELECT * FROM t WHERE a = :p1 AND b = :p2"
    with pytest.raises(ValueError, match="paramstyle"):
        _rewrite_placeholders(sql, "carrier-pigeon")


def test_inline_parameters_quotes_values():
    sql = "SELECT * FROM t WHERE a = ? AND b = ? AND c = ? AND d = ?"
    assert _inline_parameters(sql, ("O'Hara", 3, None, True)) == (
        "SELECT * FROM t WHERE a = 'O''Hara' AND b = 3 AND c = NULL AND d = 1"
    )


# ---------- DB-API ----------


def test_dbapi_connection_against_sqlite():
    connection = DbApiMetadataConnection(sqlite3.connect(":memory:"))
    connection.execute("CREATE TABLE Users (Id INTEGER PRIMARY KEY, Name TEXT)")
    connection.execute("INSERT INTO Users (Id, Name) VALUES (1, 'ada')")

    rows = connection.query("SELECT Id, Name FROM Users WHERE Name = ?", ("ada",))

    assert rows == [{"id": 1, "name": "ada"}]


class RecordingCursor:
    def __init__(self, fail=False):
        self.fail = fail
        self.closed = False
        self.executed = []
        self.description = (("COLUMN_NAME",),)

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.fail:
            raise RuntimeError("query failed")

    def fetchall(self):
        return [("id",)]

    def close(self):
        self.closed = True


class RecordingConnection:
    def __init__(self, fail=False):
        self.cursors = []
        self.commits = 0
        self.fail = fail

    def cursor(self):
        cursor = RecordingCursor(self.fail)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.commits += 1


def test_dbapi_binds_named_parameters():
    raw = RecordingConnection()
    connection = DbApiMetadataConnection(raw, paramstyle="named")
    rows = connection.query("SELECT 1 WHERE a = ? AND b = ?", ("x", "y"))

    assert rows == [{"column_name": "id"}]
    assert raw.cursors[0].executed == [("SELECT 1 WHERE a = :p1 AND b = :p2", {"p1": "x", "p2": "y"})]
    assert raw.cursors[0].closed


def test_dbapi_closes_cursor_when_query_fails():
    raw = RecordingConnection(fail=True)
    with pytest.raises(RuntimeError):
        DbApiMetadataConnection(raw).query("SELECT 1")
    assert raw.cursors[0].closed


def test_dbapi_commit_follows_autocommit():
    raw = RecordingConnection()
    DbApiMetadataConnection(raw).execute("DROP TABLE t")
    DbApiMetadataConnection(raw, autocommit=False).execute("DROP TABLE t")
    assert raw.commits == 1
    assert all(cursor.closed for cursor in raw.cursors)


# ---------- Spark JDBC ----------


class FakeRow:
    def __init__(self, **values):
        self.values = values

    def asDict(self):
        return dict(self.values)


class FakeReader:
    def __init__(self, rows):
        self.rows = rows
        self.options = {}
        self.source = None

    def format(self, source):
        self.source = source
        return self

    def option(self, key, value):
        self.options[key] = value
        return self

    def load(self):
        return self

    def collect(self):
        return self.rows


class FakeSpark:
    def __init__(self, rows):
        self.read = FakeReader(rows)


def test_spark_connection_inlines_parameters_and_lowercases_keys():
    spark = FakeSpark([FakeRow(TABLE_NAME="ORDERS", TABLE_SCHEMA="APP")])
    connection = SparkJdbcMetadataConnection(spark, "jdbc:derby:memory:shop", {"user": "app"})

    rows = connection.query("SELECT * FROM t WHERE owner LIKE ? AND name LIKE ?", ("APP", "%"))

    assert rows == [{"table_name": "ORDERS", "table_schema": "APP"}]
    assert spark.read.source == "jdbc"
    assert spark.read.options == {
        "url": "jdbc:derby:memory:shop",
        "user": "app",
        "query": "SELECT * FROM t WHERE owner LIKE 'APP' AND name LIKE '%'",
    }


def test_spark_connection_against_derby(spark_fixture):
    url = "jdbc:derby:memory:ddl_engine_tests;create=true"
    connection = SparkJdbcMetadataConnection(
        spark_fixture, url, {"driver": "org.apache.derby.jdbc.EmbeddedDriver"}
    )
    connection.execute("CREATE TABLE ORDERS (ID INTEGER NOT NULL PRIMARY KEY)")

    rows = connection.query(
        "SELECT TABLENAME AS TABLE_NAME FROM SYS.SYSTABLES WHERE TABLENAME = ?", ("ORDERS",)
    )

    assert rows == [{"table_name": "ORDERS"}]
