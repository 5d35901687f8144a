import pytest

from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.errors import DependencyOrderError
from src.ddl_engine.models import (
    Column,
    Database,
    ForeignKey,
    Index,
    Reference,
    Table,
    structurally_equal,
)
from src.ddl_engine.plan.changes import AlterColumn, apply_changes
from src.ddl_engine.plan.differ import Differ
from src.ddl_engine.plan.ordering import PHASES, phase_of
from src.ddl_engine.types import ColumnType, LogicalType
from src.enums import CascadeAction
from tests.ddl_engine.fakes import INTEGER, orders_table, varchar


def diff(current, desired, **kwargs):
    return Differ(**kwargs).diff(current, desired)


def assert_reaches(current, desired):
    change_set = diff(current, desired)
    assert structurally_equal(apply_changes(current, change_set), desired)
    return change_set


# ---------- identity ----------


@pytest.mark.parametrize("model", ["users_v1", "users_v2", "shop_with_orders", "shop_without_orders"])
def test_diff_of_a_model_with_itself_is_empty(model, request):
    database = request.getfixturevalue(model)
    assert not diff(database, database)
    assert len(diff(database, database)) == 0


def test_unnamed_index_matches_named_one_with_same_definition(users_v2):
    table = users_v2.tables[0]
    unnamed = users_v2.replace_table(table.with_indexes((Index(("email",), is_unique=True),)))
    assert not diff(users_v2, unnamed)


# ---------- end to end ----------


def test_new_column_and_index(users_v1, users_v2):
    change_set = assert_reaches(users_v1, users_v2)
    assert change_set.describe() == ["AddColumn(USERS.email)", "AddIndex(USERS.idx_email)"]


def test_dropped_table_and_its_incoming_foreign_key(shop_with_orders, shop_without_orders):
    change_set = assert_reaches(shop_with_orders, shop_without_orders)
    assert change_set.describe() == ["DropForeignKey(ORDER_ITEMS.fk_order)", "DropTable(ORDERS)"]


def test_new_table_gets_foreign_keys_after_creation(shop_with_orders):
    current = Database(name="shop", tables=(orders_table(),))
    change_set = assert_reaches(current, shop_with_orders)
    assert change_set.describe() == ["CreateTable(ORDER_ITEMS)", "AddForeignKey(ORDER_ITEMS.fk_order)"]
    assert change_set.changes[0].table.foreign_keys == ()


def test_drop_column(shop_with_orders):
    items = shop_with_orders.find_table("ORDER_ITEMS")
    desired = shop_with_orders.replace_table(items.with_columns(items.columns[:2]))
    change_set = assert_reaches(shop_with_orders, desired)
    assert change_set.describe() == ["DropColumn(ORDER_ITEMS.quantity)"]


def test_changed_column_is_altered(users_v1):
    table = users_v1.tables[0]
    widened = users_v1.replace_table(
        table.with_columns((table.columns[0], Column("name", varchar(200), is_nullable=False)))
    )
    change_set = assert_reaches(users_v1, widened)
    (change,) = change_set
    assert isinstance(change, AlterColumn)
    assert change.describe() == "AlterColumn(USERS.name)"
    assert change.previous == table.columns[1]


def test_default_sizes_are_applied_before_comparing_columns():
    def with_name_type(data_type):
        table = Table("T", (Column("name", data_type),))
        return Database("db", (table,))

    declared = with_name_type(ColumnType(LogicalType.VARCHAR))
    read_back = with_name_type(varchar(254))

    assert diff(read_back, declared).describe() == ["AlterColumn(T.name)"]
    assert not diff(read_back, declared, type_mapping=GENERIC.type_mapping)
    assert diff(with_name_type(varchar(100)), declared, type_mapping=GENERIC.type_mapping)


def test_changed_primary_key_is_dropped_and_added():
    current = Database(
        "db",
        (
            Table(
                "T",
                (
                    Column("a", INTEGER, is_nullable=False, is_primary_key=True),
                    Column("b", INTEGER, is_nullable=False),
                ),
            ),
        ),
    )
    desired = current.replace_table(current.tables[0].with_primary_key(("b", "a")))
    change_set = assert_reaches(current, desired)
    assert change_set.describe() == ["DropPrimaryKey(T)", "AddPrimaryKey(T)"]
    assert change_set.changes[1].column_names == ("b", "a")


def test_changed_foreign_key_definition_is_dropped_and_added(shop_with_orders):
    items = shop_with_orders.find_table("ORDER_ITEMS")
    cascading = ForeignKey(
        "ORDERS", (Reference("order_id", "id"),), name="fk_order", on_delete=CascadeAction.CASCADE
    )
    desired = shop_with_orders.replace_table(items.with_foreign_keys((cascading,)))
    change_set = assert_reaches(shop_with_orders, desired)
    assert change_set.describe() == [
        "DropForeignKey(ORDER_ITEMS.fk_order)",
        "AddForeignKey(ORDER_ITEMS.fk_order)",
    ]


def test_renamed_index_is_dropped_and_added(users_v2):
    table = users_v2.tables[0]
    renamed = users_v2.replace_table(
        table.with_indexes((Index(("email",), is_unique=True, name="idx_mail"),))
    )
    change_set = assert_reaches(users_v2, renamed)
    assert change_set.describe() == ["DropIndex(USERS.idx_email)", "AddIndex(USERS.idx_mail)"]


# ---------- matching ----------


def test_table_names_match_case_insensitively_by_default(users_v1):
    lower = users_v1.with_tables(
        (Table("users", users_v1.tables[0].columns),)
    )
    assert not diff(users_v1, lower)
    assert diff(users_v1, lower, case_sensitive=True).describe() == [
        "DropTable(USERS)",
        "CreateTable(users)",
    ]


# ---------- ordering ----------


def test_changes_follow_phase_order(shop_with_orders, users_v2):
    items = shop_with_orders.find_table("ORDER_ITEMS")
    current = Database(
        "shop", (*shop_with_orders.tables, Table("LEGACY", (Column("id", INTEGER),)))
    )
    desired = Database(
        "shop",
        (
            users_v2.tables[0],
            orders_table(),
            items.with_columns(
                (*items.columns[:2], Column("quantity", INTEGER, default="2"), Column("sku", varchar(12)))
            ).with_indexes((Index(("sku",)),)),
        ),
    )
    change_set = assert_reaches(current, desired)
    phases = [phase_of(change) for change in change_set]
    assert phases == sorted(phases)
    assert change_set.describe() == [
        "DropTable(LEGACY)",
        "CreateTable(USERS)",
        "AddColumn(ORDER_ITEMS.sku)",
        "AlterColumn(ORDER_ITEMS.quantity)",
        "AddIndex(ORDER_ITEMS.sku)",
    ]


def test_referencing_tables_are_dropped_first(shop_with_orders):
    change_set = diff(shop_with_orders, Database("shop"))
    assert change_set.describe() == ["DropTable(ORDER_ITEMS)", "DropTable(ORDERS)"]
    assert apply_changes(shop_with_orders, change_set).tables == ()


def test_cyclic_drops_raise():
    left = Table(
        "A",
        (Column("id", INTEGER, is_primary_key=True), Column("b_id", INTEGER)),
        foreign_keys=(ForeignKey("B", (Reference("b_id", "id"),)),),
    )
    right = Table(
        "B",
        (Column("id", INTEGER, is_primary_key=True), Column("a_id", INTEGER)),
        foreign_keys=(ForeignKey("A", (Reference("a_id", "id"),)),),
    )
    with pytest.raises(DependencyOrderError) as caught:
        diff(Database("db", (left, right)), Database("db"))
    assert set(caught.value.tables) == {"A", "B"}


def test_self_reference_does_not_block_drop():
    tree = Table(
        "NODES",
        (Column("id", INTEGER, is_primary_key=True), Column("parent_id", INTEGER)),
        foreign_keys=(ForeignKey("NODES", (Reference("parent_id", "id"),)),),
    )
    assert diff(Database("db", (tree,)), Database("db")).describe() == ["DropTable(NODES)"]


def test_phase_table_is_complete():
    assert len(PHASES) == 11
    assert PHASES[0].__name__ == "DropForeignKey"
    assert PHASES[-1].__name__ == "AddForeignKey"
