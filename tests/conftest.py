"""
Shared pytest fixtures.

Provides a seeded Faker instance, a padding helper for whitespace tests,
an isolated extension registry, and cleanup of reflector overrides.
"""
import pytest
from faker import Faker

from fieldnorm.registry.extensions import TransformRegistry
from fieldnorm.schemas.reflector import clear_overrides


@pytest.fixture
def fake():
    """Faker with a fixed seed so generated data is reproducible."""
    Faker.seed(4321)
    return Faker()


@pytest.fixture
def pad(fake):
    """Wrap a string in a random number of spaces on both sides."""
    def _pad(value: str) -> str:
        return " " * fake.random_int(0, 20) + value + " " * fake.random_int(0, 20)
    return _pad


@pytest.fixture
def registry():
    """Empty registry, isolated from the process-wide one."""
    return TransformRegistry()


@pytest.fixture(autouse=True)
def reset_overrides():
    """Drop annotation overrides installed by a test."""
    yield
    clear_overrides()
