import json

import pytest

from src.ddl_engine.errors import ValidationError
from src.ddl_engine.io.loader import (
    database_from_dict,
    database_to_dict,
    dump_database,
    load_database,
    load_databases,
    merge_databases,
)
from src.ddl_engine.io.sources import DirectoryFileSource
from src.ddl_engine.models import Database, structurally_equal
from src.ddl_engine.types import ColumnType, LogicalType
from src.enums import CascadeAction

SHOP_DOCUMENT = {
    "name": "shop",
    "version": "3",
    "tables": [
        {
            "name": "ORDERS",
            "columns": [
                {"name": "id", "type": "INTEGER", "nullable": False, "primary_key": True},
                {"name": "total", "type": "DECIMAL(10,2)", "default": 0},
            ],
        },
        {
            "name": "ORDER_ITEMS",
            "description": "One line per product",
            "columns": [
                {"name": "order_id", "type": "INTEGER", "nullable": False},
                {"name": "line", "type": "SMALLINT", "nullable": False},
                {"name": "sku", "type": "varchar(12)"},
            ],
            "primary_key": ["order_id", "line"],
            "foreign_keys": [
                {
                    "name": "fk_order",
                    "foreign_table": "ORDERS",
                    "references": [{"local": "order_id", "foreign": "id"}],
                    "on_delete": "cascade",
                    "on_update": "NO ACTION",
                }
            ],
            "indexes": [{"columns": ["sku"]}],
        },
    ],
}


def test_document_becomes_model():
    database = database_from_dict(SHOP_DOCUMENT)

    assert database.version == "3"
    orders, items = database.tables
    assert orders.primary_key_column_names == ("id",)
    assert orders.find_column("total").data_type == ColumnType(
        LogicalType.DECIMAL, precision=10, scale=2
    )
    assert orders.find_column("total").default == "0"
    assert items.primary_key_column_names == ("order_id", "line")
    assert items.find_column("sku").data_type == ColumnType(LogicalType.VARCHAR, size=12)
    assert items.foreign_keys[0].on_delete is CascadeAction.CASCADE
    assert items.foreign_keys[0].on_update is CascadeAction.NONE
    assert items.indexes[0].name is None
    assert items.description == "One line per product"


def test_model_survives_dump_and_load(tmp_path):
    database = database_from_dict(SHOP_DOCUMENT)
    path = tmp_path / "shop.json"

    dump_database(database, path)

    assert path.read_text(encoding="utf-8").endswith("}\n")
    assert structurally_equal(load_database(path), database)
    assert database_to_dict(load_database(path)) == database_to_dict(database)


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ({"tables": []}, "missing required key 'name'"),
        ({"name": "x", "tables": [{"name": "T", "columns": [{"name": "a"}]}]}, "'type'"),
        (
            {"name": "x", "tables": [{"name": "T", "columns": [{"name": "a", "type": "WIDGET"}]}]},
            "Unknown logical type",
        ),
        (
            {
                "name": "x",
                "tables": [
                    {
                        "name": "T",
                        "columns": [{"name": "a", "type": "INTEGER"}],
                        "foreign_keys": [
                            {
                                "foreign_table": "T",
                                "references": [{"local": "a", "foreign": "a"}],
                                "on_delete": "EXPLODE",
                            }
                        ],
                    }
                ],
            },
            "Unknown referential action",
        ),
    ],
)
def test_bad_documents_raise_validation_error(document, message):
    with pytest.raises(ValidationError, match=message):
        database_from_dict(document)


def test_invalid_json_is_a_validation_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(ValidationError, match="invalid JSON"):
        load_database(path)


def test_load_and_merge_a_directory(tmp_path):
    (tmp_path / "nested").mkdir()
    first, second = SHOP_DOCUMENT["tables"]
    (tmp_path / "a_orders.json").write_text(
        json.dumps({"name": "shop", "tables": [first]}), encoding="utf-8"
    )
    (tmp_path / "nested" / "b_items.json").write_text(
        json.dumps({"name": "items", "tables": [{**second, "foreign_keys": []}]}), encoding="utf-8"
    )
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    databases = load_databases(DirectoryFileSource(tmp_path))
    merged = merge_databases(databases)

    assert [database.name for database in databases] == ["shop", "items"]
    assert merged.name == "shop"
    assert merged.table_names == ("ORDERS", "ORDER_ITEMS")


def test_merge_rejects_duplicates_and_empty_input():
    database = database_from_dict(SHOP_DOCUMENT)
    with pytest.raises(ValidationError, match="duplicate tables"):
        merge_databases([database, database])
    with pytest.raises(ValidationError, match="No schema documents"):
        merge_databases([])
    assert merge_databases([Database("a")], name="renamed").name == "renamed"
