import pytest

from tests.helpers import FakeClock, FakeSession


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_clock():
    return FakeClock()
