"""
Connection adapters implementing `MetadataConnection`.

- DbApiMetadataConnection: any DB-API 2.0 connection (psycopg, mysqlclient,
  oracledb, sqlite3, ...). Rewrites `?` placeholders for the driver's paramstyle.
- SparkJdbcMetadataConnection: runs catalog queries through Spark's JDBC
  reader, for environments where the database is reachable only from Spark.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from contextlib import closing
from typing import Any

from pyspark.sql import SparkSession

from src.ddl_engine.identifiers import quote_sql_literal
from src.ddl_engine.state.ports import Row
from src.logger import LOGGER

_PLACEHOLDER = re.compile(r"\?")


def _rewrite_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite `?` placeholders for a DB-API paramstyle (qmark, format, pyformat, numeric, named)."""
    if paramstyle == "qmark":
        return sql
    if paramstyle in ("format", "pyformat"):
        return _PLACEHOLDER.sub("%s", sql.replace("%", "%%"))

    counter = iter(range(1, sql.count("?") + 1))
    if paramstyle == "numeric":
        return _PLACEHOLDER.sub(lambda _: f":{next(counter)}", sql)
    if paramstyle == "named":
        return _PLACEHOLDER.sub(lambda _: f":p{next(counter)}", sql)
    raise ValueError(f"Unsupported DB-API paramstyle: {paramstyle!r}")


def _bind_parameters(params: Sequence[Any], paramstyle: str) -> Sequence[Any] | Mapping[str, Any]:
    if paramstyle == "named":
        return {f"p{position}": value for position, value in enumerate(params, start=1)}
    return tuple(params)


def _inline_parameters(sql: str, params: Sequence[Any]) -> str:
    """Replace `?` placeholders with quoted literals (for drivers without binding)."""
    values = iter(params)

    def literal(_: re.Match[str]) -> str:
        value = next(values)
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int | float):
            return str(value)
        return quote_sql_literal(str(value))

    return _PLACEHOLDER.sub(literal, sql)


class DbApiMetadataConnection:
    """Adapt a DB-API 2.0 connection to `MetadataConnection`."""

    def __init__(self, connection: Any, paramstyle: str = "qmark", autocommit: bool = True) -> None:
        self.connection = connection
        self.paramstyle = paramstyle
        self.autocommit = autocommit

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        statement = _rewrite_placeholders(sql, self.paramstyle)
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(statement, _bind_parameters(params, self.paramstyle))
            names = [str(description[0]).lower() for description in cursor.description or ()]
            return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]

    def execute(self, sql: str) -> None:
        LOGGER.debug("Executing: %s", sql)
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(sql)
        if self.autocommit:
            self.connection.commit()


class SparkJdbcMetadataConnection:
    """
    Run catalog queries through Spark's JDBC data source.

    Spark's reader does not bind parameters, so `?` placeholders are inlined as
    escaped literals. DDL goes through the JVM's `java.sql.DriverManager`.
    """

    def __init__(
        self,
        spark: SparkSession,
        url: str,
        properties: Mapping[str, str] | None = None,
    ) -> None:
        self.spark = spark
        self.url = url
        self.properties = dict(properties or {})

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        statement = _inline_parameters(sql, params)
        reader = self.spark.read.format("jdbc").option("url", self.url)
        for key, value in self.properties.items():
            reader = reader.option(key, value)
        rows = reader.option("query", statement).load().collect()
        return [{key.lower(): value for key, value in row.asDict().items()} for row in rows]

    def execute(self, sql: str) -> None:
        LOGGER.debug("Executing over JDBC: %s", sql)
        jvm = self.spark.sparkContext._jvm
        java_properties = jvm.java.util.Properties()
        for key, value in self.properties.items():
            java_properties.setProperty(key, value)
        connection = jvm.java.sql.DriverManager.getConnection(self.url, java_properties)
        try:
            statement = connection.createStatement()
            try:
                statement.execute(sql)
            finally:
                statement.close()
        finally:
            connection.close()
