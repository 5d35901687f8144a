import pytest

from src.ddl_engine.dialects.base import derive
from src.ddl_engine.dialects.generic import GENERIC
from src.ddl_engine.dialects.registry import BUILTIN_DIALECTS, DialectRegistry, default_registry
from src.ddl_engine.errors import UnknownPlatformError
from src.ddl_engine.platform import Platform
from src.enums import DialectName


def test_default_registry_contains_every_builtin_dialect():
    registry = default_registry()
    assert set(registry.names) == {name.value for name in DialectName}
    assert len(BUILTIN_DIALECTS) == len(DialectName)


def test_default_registry_is_built_once():
    assert default_registry() is default_registry()


def test_lookup_is_case_insensitive():
    assert default_registry().get("Oracle10").name == "oracle10"
    assert "MAXDB" in default_registry()


def test_unknown_name_raises():
    with pytest.raises(UnknownPlatformError) as caught:
        default_registry().get("db2")
    assert caught.value.name == "db2"
    assert "generic" in caught.value.known


def test_register_returns_new_registry():
    original = DialectRegistry.from_platforms([Platform(GENERIC)])
    custom = Platform(derive(GENERIC, name="Custom"))
    extended = original.register(custom)

    assert extended.get("custom") is custom
    with pytest.raises(UnknownPlatformError):
        original.get("custom")


def test_platform_wires_reader_and_quoting():
    platform = Platform(GENERIC, delimited_identifiers=True)
    assert platform.reader.dialect is GENERIC
    assert platform.quote_identifier("a b") == '"a b"'
    assert Platform(GENERIC, delimited_identifiers=False).quote_identifier("a b") == "a b"
    assert platform.max_identifier_length == GENERIC.quoting.max_identifier_length
