from __future__ import annotations

import pytest

from src.ddl_engine.models import Database
from tests.ddl_engine import fakes


@pytest.fixture
def users_v1() -> Database:
    return fakes.users_v1()


@pytest.fixture
def users_v2() -> Database:
    return fakes.users_v2()


@pytest.fixture
def shop_with_orders() -> Database:
    return fakes.shop_with_orders()


@pytest.fixture
def shop_without_orders() -> Database:
    return fakes.shop_without_orders()


@pytest.fixture
def connection() -> fakes.FakeConnection:
    return fakes.FakeConnection()
