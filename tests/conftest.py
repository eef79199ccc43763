"""Shared test fixtures."""
import pytest

from domain import MessageBuffer, Registry

DAY = "2030-01-01"
NEXT_DAY = "2030-01-02"


@pytest.fixture
def messages() -> MessageBuffer:
    return MessageBuffer()


@pytest.fixture
def registry(messages) -> Registry:
    """Registry with one doctor "A" and one patient "P"."""
    reg = Registry(reporter=messages)
    reg.add_doctor("A")
    reg.add_patient("P", "01.01.1990")
    messages.drain()
    return reg


@pytest.fixture
def seeded_registry(messages) -> Registry:
    reg = Registry(reporter=messages)
    reg.load_defaults(today_date=DAY, tomorrow_date=NEXT_DAY)
    return reg
