"""Shared test fixtures."""

import pytest

from moviestack.feedback import ActionFeedback
from moviestack.identity import IdentityStore
from tests.unit.fakes import FakeApi, FakeScheduler, FakeStorage


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def identity_store(storage: FakeStorage) -> IdentityStore:
    return IdentityStore(storage)


@pytest.fixture
def feedback() -> ActionFeedback:
    return ActionFeedback()
