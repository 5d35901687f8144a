from src.ddl_engine.errors import (
    DependencyOrderError,
    MetadataReadError,
    UnknownPlatformError,
    summarize_exception,
)


def test_metadata_read_error_from_exception_keeps_first_line():
    error = MetadataReadError.from_exception("T", "columns", ValueError("bad row\nstack"))
    assert error.table_name == "T"
    assert error.aspect == "columns"
    assert error.message == "ValueError: bad row"
    assert str(error) == "Failed to read columns for table 'T': ValueError: bad row"


def test_summarize_exception_bounds_length_and_handles_plain_messages():
    assert len(summarize_exception(RuntimeError("x" * 1000))) == 300
    assert summarize_exception("first\nsecond") == "first"
    assert summarize_exception(KeyError()) == "KeyError"


def test_unknown_platform_error_lists_known_names():
    error = UnknownPlatformError("db2", ["generic", "mysql"])
    assert isinstance(error, LookupError)
    assert "db2" in str(error) and "generic, mysql" in str(error)


def test_dependency_order_error_carries_tables():
    error = DependencyOrderError("cycle", tables=["A", "B"])
    assert error.tables == ("A", "B")
