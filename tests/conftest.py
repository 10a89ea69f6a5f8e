import pytest

from bookstore import BookOrder, Bookstore
from verifying_doubles.sandbox import Sandbox
from utils import Mailer

pytest_plugins = ["pytester", "verifying_doubles.pytest_plugin"]


@pytest.fixture
def sandbox():
    """A Sandbox that is reset, but not verified, after the test."""
    box = Sandbox()
    yield box
    box.reset()


@pytest.fixture
def store():
    return Bookstore()


@pytest.fixture
def order():
    return BookOrder("Ruby 101", "Alice")


@pytest.fixture
def mailer():
    return Mailer()
