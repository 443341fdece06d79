"""Shared test fixtures for the jsongroup test suite.

WHY: Most test modules exercise the same user/address model under
different groups and options. Centralizing the model and sample values
here keeps the expected outputs consistent across modules.

HOW: Module-level dataclasses mirror a typical API model: a User with
an Address, tags and settings, plus an embedded BaseInfo inside a
Profile. Fixtures return fresh instances and an isolated FieldCache.
An autouse fixture resets the process-wide cache after every test.

RULES:
- Fixtures return new objects per test; tests may mutate them freely
- Tests that inspect default_cache statistics clear it first
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from jsongroup import config
from jsongroup.core.cache import FieldCache, default_cache
from jsongroup.core.fields import group_field, tags


@dataclass
class Address:
    street: str = field(default="", metadata=tags("street", "admin,public"))
    city: str = field(default="", metadata=tags("city", "admin,public"))
    zip: str = field(default="", metadata=tags("zip", "admin"))


@dataclass
class User:
    id: int = group_field("public,admin", json="id", default=0)
    name: str = group_field("public,admin", json="name,omitempty", default="")
    email: str = group_field("admin,internal", json="email", default="")
    password: str = group_field("internal", json="password", default="")
    address: Optional[Address] = group_field("public,admin", json="address", default=None)
    tags: Optional[List[str]] = group_field("public", json="tags", default_factory=list)
    settings: Optional[Dict[str, Any]] = group_field("admin", json="settings", default=None)


@dataclass
class BaseInfo:
    created_at: str = group_field("admin", json="created_at", default="")
    updated_at: str = group_field("admin", json="updated_at", default="")


@dataclass
class Profile:
    base: BaseInfo = group_field(embedded=True, default_factory=BaseInfo)
    age: int = group_field("public,admin", json="age", default=0)
    bio: str = group_field("public", json="bio", default="")
    private: bool = group_field("admin", json="private", default=False)


@dataclass
class ComplexUser:
    user: User = group_field(embedded=True, default_factory=User)
    profile: Profile = group_field(
        "public,admin", json="profile", embedded=True, default_factory=Profile,
    )


@pytest.fixture(autouse=True)
def reset_default_cache():
    """Restore the process-wide cache after each test."""
    yield
    default_cache.set_capacity(config.DEFAULT_CACHE_CAPACITY)
    default_cache.clear()


@pytest.fixture
def cache():
    """An isolated cache so statistics are not shared between tests."""
    return FieldCache(capacity=16)


@pytest.fixture
def address():
    return Address(street="1 Main Street", city="Springfield", zip="12345")


@pytest.fixture
def user(address):
    return User(
        id=1,
        name="Ann",
        email="ann@example.com",
        password="secret",
        address=address,
        tags=["vip", "new"],
        settings={"theme": "dark", "notifications": True},
    )


@pytest.fixture
def complex_user(address):
    return ComplexUser(
        user=User(
            id=1,
            name="Ann",
            email="ann@example.com",
            address=address,
            tags=["vip"],
        ),
        profile=Profile(
            base=BaseInfo(created_at="2023-01-01", updated_at="2023-05-01"),
            age=30,
            bio="Engineer",
            private=True,
        ),
    )
