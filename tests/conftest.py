"""
conftest.py - Shared pytest fixtures for exchange tests

Provides common fixtures used across service and API tests:
- Registered users (starting grant, funded)
- A pending payment ready to confirm
- Store doubles for failure paths
"""

import pytest
from decimal import Decimal

from django.db import DatabaseError

from core.errors import NotFound
from core.models import User
from core.services import initiate_payment, register_user
from core.store import LedgerStore


# =============================================================================
# STORE DOUBLES
# =============================================================================

class OrphanStore(LedgerStore):
    """Store whose users have all disappeared by the time a payment confirms."""

    def lock_user(self, user_id):
        raise NotFound("user not found")


class BrokenPaymentsStore(LedgerStore):
    """Store that fails writing payments, after the coin debit already ran."""

    def upsert(self, collection, record):
        if collection == "payments":
            raise DatabaseError("disk I/O error")
        return super().upsert(collection, record)


class BrokenOrdersStore(LedgerStore):
    """Store that fails appending the order, after crypto was already credited."""

    def upsert(self, collection, record):
        if collection == "orders":
            raise DatabaseError("disk I/O error")
        return super().upsert(collection, record)


class RacingRegistrationStore(LedgerStore):
    """Store where another request inserts the same user id just before us."""

    def upsert(self, collection, record):
        if collection == "users":
            User.objects.create(pk=record.pk, name="Early bird")
        return super().upsert(collection, record)


class ExplodingProcessor:
    simulated = True

    @staticmethod
    def create_charge(payment):
        raise RuntimeError("processor unavailable")


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def alice(db):
    """User holding exactly the starting grant (2000 coins)."""
    return register_user(user_id="alice", name="Alice", email="alice@example.com")


@pytest.fixture
def whale(db):
    """User with enough coins for several conversions."""
    user = register_user(user_id="whale", name="Whale")
    User.objects.filter(pk=user.pk).update(coins=Decimal("10000"))
    user.refresh_from_db()
    return user


@pytest.fixture
def pending_payment(alice):
    return initiate_payment("alice", 2000)


@pytest.fixture
def orphan_store():
    return OrphanStore()


@pytest.fixture
def broken_store():
    return BrokenPaymentsStore()


@pytest.fixture
def broken_orders_store():
    return BrokenOrdersStore()


@pytest.fixture
def racing_store():
    return RacingRegistrationStore()


@pytest.fixture
def exploding_processor():
    return ExplodingProcessor()
