import pytest

from src.ddl_engine.errors import ValidationError
from src.ddl_engine.models import Column, Index
from src.ddl_engine.plan.changes import (
    AddColumn,
    AddIndex,
    AddPrimaryKey,
    AlterColumn,
    Change,
    ChangeSet,
    CreateTable,
    DropColumn,
    DropForeignKey,
    DropIndex,
    DropPrimaryKey,
    DropTable,
    apply_changes,
)
from src.ddl_engine.plan.ordering import order_changes, phase_of
from tests.ddl_engine.fakes import INTEGER, orders_table, varchar


def test_changes_never_mutate_input(users_v1):
    table = users_v1.tables[0]
    updated = AddColumn(table, Column("email", varchar(20))).apply(users_v1)
    assert users_v1.tables[0].column_names == ("id", "name")
    assert updated.tables[0].column_names == ("id", "name", "email")


def test_add_column_appends_without_primary_key_flag(users_v1):
    table = users_v1.tables[0]
    updated = AddColumn(table, Column("code", INTEGER, is_primary_key=True)).apply(users_v1)
    assert updated.tables[0].columns[-1].is_primary_key is False
    assert updated.tables[0].primary_key_column_names == ("id",)


def test_alter_column_keeps_position_and_key_flag(users_v1):
    table = users_v1.tables[0]
    column = Column("ID", INTEGER, is_nullable=False, default="0")
    updated = AlterColumn(table, column, previous=table.columns[0]).apply(users_v1)
    first = updated.tables[0].columns[0]
    assert first.name == "id"
    assert first.default == "0"
    assert first.is_primary_key


def test_primary_key_changes(users_v1):
    table = users_v1.tables[0]
    dropped = DropPrimaryKey(table).apply(users_v1)
    assert dropped.tables[0].primary_key_columns == ()

    added = AddPrimaryKey(table, (table.columns[1], table.columns[0])).apply(dropped)
    assert added.tables[0].primary_key_column_names == ("name", "id")


def test_index_and_foreign_key_removal(users_v2, shop_with_orders):
    table = users_v2.tables[0]
    assert DropIndex(table, Index(("email",), is_unique=True)).apply(users_v2).tables[0].indexes == ()

    items = shop_with_orders.find_table("ORDER_ITEMS")
    updated = DropForeignKey(items, items.foreign_keys[0]).apply(shop_with_orders)
    assert updated.find_table("ORDER_ITEMS").foreign_keys == ()


def test_change_on_missing_table_raises(users_v1):
    with pytest.raises(ValidationError, match="does not exist"):
        DropColumn(orders_table(), orders_table().columns[1]).apply(users_v1)


def test_apply_changes_validates_each_step(users_v1):
    with pytest.raises(ValidationError, match="duplicate tables"):
        apply_changes(users_v1, [CreateTable(users_v1.tables[0])])


def test_describe_labels(users_v2):
    table = users_v2.tables[0]
    assert CreateTable(table).describe() == "CreateTable(USERS)"
    assert AddIndex(table, Index(("name", "email"))).describe() == "AddIndex(USERS.name,email)"
    assert DropTable(table).describe() == "DropTable(USERS)"


def test_change_set_is_sized_and_iterable(users_v1):
    table = users_v1.tables[0]
    change_set = ChangeSet((DropTable(table),))
    assert bool(change_set) and len(change_set) == 1
    assert list(change_set) == [DropTable(table)]
    assert not ChangeSet()


def test_order_changes_is_stable_within_phase(users_v1):
    table = users_v1.tables[0]
    first = AddColumn(table, Column("a", INTEGER))
    second = AddColumn(table, Column("b", INTEGER))
    drop = DropTable(orders_table())
    assert order_changes([first, drop, second]) == (drop, first, second)


def test_unknown_change_has_no_phase(users_v1):
    class Comment(Change):
        pass

    with pytest.raises(TypeError, match="Comment"):
        phase_of(Comment(users_v1.tables[0]))
