import logging

import pytest
from pyspark.sql import SparkSession

# Names of fixture that require Spark to be available
_SPARK_FIXTURE_NAME = "spark_fixture"


def quiet_py4j() -> None:
    """Turn down Spark logging during the test context."""
    logging.getLogger("py4j").setLevel(logging.WARN)


@pytest.fixture(scope="session")
def spark_fixture():
    quiet_py4j()

    spark = (
        SparkSession.Builder()
        .appName("ddl-engine JDBC tests")
        # Catalog queries are tiny; one local core is plenty.
        .master("local[1]")
        # fail faster if there's an issue with initial [local] conections
        .config("spark.network.timeout", "10000")
        .config("spark.executor.heartbeatInterval", "1000")
        .config("spark.driver.memory", "1g")
        .config("spark.sql.shuffle.partitions", "1")
        .config("spark.default.parallelism", "1")
        # No need for any UI components, or keeping history
        .config("spark.ui.showConsoleProgress", "false")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )

    yield spark

    spark.stop()


def _mark_tests_using_spark_fixture(tests: list[pytest.Function]) -> None:
    """
    Adds the `requires_spark` marker to tests that are using the fixture that require a
    Spark instance.

    :param tests: list of tests collected by `pytest`
    """
    for test in tests:
        if _SPARK_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_spark)


def _skip_spark_tests(test: pytest.Function) -> None:
    """
    Tell `pytest` to skip tests that require a SparkSession.

    Not invoked when `--include-spark-tests` is given.

    :param test: test collected by `pytest`
    """
    requires_spark_markers = list(test.iter_markers(name="requires_spark"))

    if requires_spark_markers:
        pytest.skip("Skipped tests that require a SparkSession")


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-spark-tests",
        action="store_true",
        default=False,
        help="Also run the tests that start a local SparkSession.",
    )


def pytest_configure(config: pytest.Config):
    config.addinivalue_line("markers", "requires_spark: test needs a local SparkSession")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-spark-tests"):
        _mark_tests_using_spark_fixture(tests=items)


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-spark-tests"):
        _skip_spark_tests(test=item)
