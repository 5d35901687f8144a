import pytest

from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.dialects.oracle import ORACLE8
from src.ddl_engine.engine import AlterOptions, Engine
from src.ddl_engine.errors import MetadataReadError, UnknownPlatformError
from src.ddl_engine.execute.ports import ApplyStatus, ExecutionPolicy
from src.ddl_engine.models import Column, Database, Table
from src.ddl_engine.platform import Platform
from src.ddl_engine.types import ColumnType, LogicalType
from src.ddl_engine.validation.validator import Validator
from tests.ddl_engine.fakes import INTEGER, catalog, column_row

USERS_V1_CATALOG = {
    "columns": {
        "USERS": [
            column_row("id", "integer", 1, nullable="NO"),
            column_row("name", "character varying", 2, size=100),
        ]
    },
    "primary_keys": {
        "USERS": [{"constraint_name": "users_pk", "column_name": "id", "ordinal_position": 1}]
    },
}

EXPECTED_USERS_UPGRADE = (
    "ALTER TABLE USERS ADD COLUMN email VARCHAR(254) DEFAULT '' NOT NULL",
    "CREATE UNIQUE INDEX idx_email ON USERS (email)",
)


def users_catalog(*extra_tables, **overrides):
    kwargs = {**USERS_V1_CATALOG, **overrides}
    return catalog(GENERIC, ("USERS", *extra_tables), **kwargs)


# ---------- construction ----------


def test_for_dialect_uses_registry():
    assert Engine.for_dialect("MySQL").platform.name == "mysql"
    with pytest.raises(UnknownPlatformError):
        Engine.for_dialect("db2")


def test_default_components_are_wired():
    engine = Engine(Platform(GENERIC))
    assert engine.differ.case_sensitive is False
    assert isinstance(engine.validator, Validator)


# ---------- rendering ----------


def test_create_and_drop_model_sql(shop_with_orders):
    engine = Engine(Platform(GENERIC))
    created = engine.create_model_sql(shop_with_orders)
    dropped = engine.drop_model_sql(shop_with_orders)

    assert [s.split("\n")[0] for s in created] == [
        "CREATE TABLE ORDERS",
        "CREATE TABLE ORDER_ITEMS",
        "ALTER TABLE ORDER_ITEMS ADD CONSTRAINT fk_order FOREIGN KEY (order_id) REFERENCES ORDERS (id)",
    ]
    assert dropped[-1] == "DROP TABLE ORDERS"


def test_alter_model_sql(users_v1, users_v2, shop_with_orders, shop_without_orders):
    engine = Engine(Platform(GENERIC))
    assert engine.alter_model_sql(users_v1, users_v2) == EXPECTED_USERS_UPGRADE
    assert engine.alter_model_sql(shop_with_orders, shop_without_orders) == (
        "ALTER TABLE ORDER_ITEMS DROP CONSTRAINT fk_order",
        "DROP TABLE ORDERS",
    )
    assert engine.alter_model_sql(users_v2, users_v2) == ()


# ---------- live database ----------


def test_alter_database_reads_diffs_and_applies(users_v2):
    connection = users_catalog()
    report = Engine(Platform(GENERIC)).alter_database(connection, users_v2)

    assert report.read.ok
    assert report.read.database.name == "shop"
    assert report.change_set.describe() == ["AddColumn(USERS.email)", "AddIndex(USERS.idx_email)"]
    assert report.statements == EXPECTED_USERS_UPGRADE
    assert report.validation.ok
    assert report.apply_report is not None and report.apply_report.ok
    assert connection.executed == list(EXPECTED_USERS_UPGRADE)


def test_unsized_column_is_stable_after_round_trip():
    desired = Database(name="db", tables=(Table("T", (Column("n", ColumnType(LogicalType.VARCHAR)),)),))
    engine = Engine(Platform(GENERIC))
    (created,) = engine.create_model_sql(desired)
    assert "n VARCHAR(254)" in created

    connection = catalog(GENERIC, ("T",), columns={"T": [column_row("n", "character varying", 1, size=254)]})
    report = engine.alter_database(connection, desired, AlterOptions(execute=False))

    assert report.read.database.tables[0].columns[0].data_type.size == 254
    assert not report.change_set
    assert report.statements == ()


def test_alter_database_without_execution(users_v2):
    connection = users_catalog()
    report = Engine(Platform(GENERIC)).alter_database(
        connection, users_v2, AlterOptions(execute=False)
    )
    assert report.statements == EXPECTED_USERS_UPGRADE
    assert report.apply_report is None
    assert connection.executed == []


def test_alter_database_dry_run(users_v2):
    connection = users_catalog()
    options = AlterOptions(execution_policy=ExecutionPolicy(dry_run=True))
    report = Engine(Platform(GENERIC)).alter_database(connection, users_v2, options)
    assert [r.status for r in report.apply_report.results] == [ApplyStatus.SKIPPED] * 2
    assert connection.executed == []


def test_read_errors_block_execution(users_v2):
    columns = {**USERS_V1_CATALOG["columns"], "AUDIT": RuntimeError("permission denied")}
    connection = users_catalog("AUDIT", columns=columns)

    report = Engine(Platform(GENERIC)).alter_database(connection, users_v2)

    assert len(report.read.errors) == 1
    assert not report.validation.ok
    assert report.statements == EXPECTED_USERS_UPGRADE
    assert report.apply_report is None
    assert connection.executed == []


def test_validation_errors_can_be_overridden(users_v2):
    columns = {**USERS_V1_CATALOG["columns"], "AUDIT": RuntimeError("permission denied")}
    connection = users_catalog("AUDIT", columns=columns)
    options = AlterOptions(fail_on_validation_errors=False)

    report = Engine(Platform(GENERIC)).alter_database(connection, users_v2, options)

    assert report.apply_report is not None
    assert connection.executed == list(EXPECTED_USERS_UPGRADE)


def test_strict_read_raises_first_error(users_v2):
    columns = {**USERS_V1_CATALOG["columns"], "AUDIT": RuntimeError("permission denied")}
    connection = users_catalog("AUDIT", columns=columns)
    with pytest.raises(MetadataReadError, match="AUDIT"):
        Engine(Platform(GENERIC)).alter_database(connection, users_v2, AlterOptions(strict_read=True))


def test_identifier_too_long_for_dialect_blocks_execution():
    desired = Database(
        "shop", (Table("CUSTOMER_SHIPPING_ADDRESSES_HISTORY", (Column("id", INTEGER),)),)
    )
    connection = catalog(ORACLE8, ())
    report = Engine(Platform(ORACLE8)).alter_database(connection, desired)

    assert [d.code for d in report.validation.errors] == ["IDENTIFIER_LENGTH_WITHIN_LIMIT"]
    assert report.change_set.describe() == ["CreateTable(CUSTOMER_SHIPPING_ADDRESSES_HISTORY)"]
    assert connection.executed == []


def test_failed_statement_is_reported(users_v2):
    connection = users_catalog()
    connection.fail_on = ("CREATE UNIQUE INDEX",)
    report = Engine(Platform(GENERIC)).alter_database(connection, users_v2)

    assert not report.apply_report.ok
    (failure,) = report.apply_report.failures
    assert failure.statement == EXPECTED_USERS_UPGRADE[1]
    assert connection.executed == [EXPECTED_USERS_UPGRADE[0]]
