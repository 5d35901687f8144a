import pytest

from src.ddl_engine.io.sources import DirectoryFileSource, ImportlibClassContext, discover_databases


def test_directory_source_lists_sorted_matches(tmp_path):
    (tmp_path / "sub").mkdir()
    for relative in ("b.json", "a.json", "sub/c.json", "sub/readme.md"):
        (tmp_path / relative).write_text("{}", encoding="utf-8")

    recursive = DirectoryFileSource(tmp_path).list_files()
    flat = DirectoryFileSource(tmp_path, recursive=False).list_files()

    assert [p.relative_to(tmp_path).as_posix() for p in recursive] == ["a.json", "b.json", "sub/c.json"]
    assert [p.name for p in flat] == ["a.json", "b.json"]


def test_class_context_loads_attributes():
    context = ImportlibClassContext()
    assert context.load("src.ddl_engine.dialects.generic:GENERIC").name == "generic"
    assert context.load("src.ddl_engine.dialects.mysql.MYSQL").name == "mysql"


@pytest.mark.parametrize(
    ("name", "error"),
    [
        ("GENERIC", ValueError),
        ("src.ddl_engine.dialects.generic:", ValueError),
        ("src.ddl_engine.dialects.generic:NOPE", LookupError),
    ],
)
def test_class_context_rejects_bad_names(name, error):
    with pytest.raises(error):
        ImportlibClassContext().load(name)


def test_discover_databases_walks_packages(tmp_path, monkeypatch):
    root = tmp_path / "shop_schemas"
    (root / "billing").mkdir(parents=True)
    (root / "__init__.py").write_text("", encoding="utf-8")
    (root / "billing" / "__init__.py").write_text("", encoding="utf-8")
    (root / "catalog.py").write_text(
        "from src.ddl_engine.models import Database\n"
        "CATALOG = Database(name='catalog')\n"
        "ALIAS = CATALOG\n",
        encoding="utf-8",
    )
    (root / "billing" / "invoices.py").write_text(
        "from src.ddl_engine.models import Database\nINVOICES = Database(name='invoices')\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    import shop_schemas

    names = [database.name for database in discover_databases(shop_schemas)]
    assert sorted(names) == ["catalog", "invoices"]
    assert [d.name for d in discover_databases(shop_schemas, recurse=False)] == ["catalog"]
