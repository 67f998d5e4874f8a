"""
test_services.py - Unit tests for core/services.py

Tests:
- register_user() starting grant and duplicate ids
- preview_conversion() balance checks without mutation
- initiate_payment() check order, debit, pending payment, rollback on failure
- confirm_payment() crediting, idempotency, orphaned payments
- process_confirmation_event() action handling
- list_collection() and ledger_summary()
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from core.errors import InsufficientBalance, InvalidInput, NotFound, OutOfRange, ProcessorUnavailable, StorageFailure
from core.models import CryptoHolding, Order, Payment, PaymentStatus, User
from core.services import (
    confirm_payment,
    initiate_payment,
    ledger_summary,
    list_collection,
    preview_conversion,
    process_confirmation_event,
    register_user,
)
from processor_stub.models import StubCharge


def _coins(user_id):
    return User.objects.get(pk=user_id).coins


def _btc(user_id):
    return CryptoHolding.objects.get(user_id=user_id, code="BTC").amount


# ============================================================================
# Registration
# ============================================================================

class TestRegisterUser:

    def test_starting_grant(self, alice):
        assert alice.coins == Decimal("2000")
        assert alice.crypto == {"BTC": Decimal("0.00050000"), "ETH": Decimal("0.01000000")}

    def test_generated_id(self, db):
        user = register_user()
        assert user.id.startswith("user-")
        assert user.name == "User"
        assert user.email == ""

    def test_duplicate_id_rejected(self, alice):
        with pytest.raises(InvalidInput):
            register_user(user_id="alice")
        assert User.objects.filter(pk="alice").count() == 1

    def test_duplicate_id_inserted_concurrently(self, db, racing_store):
        with pytest.raises(InvalidInput) as excinfo:
            register_user(user_id="bob", store=racing_store)
        assert excinfo.value.message == "user exists"
        assert CryptoHolding.objects.filter(user_id="bob").count() == 0


# ============================================================================
# Preview
# ============================================================================

class TestPreviewConversion:

    def test_preview_amount(self, alice):
        assert preview_conversion("alice", 2000) == Decimal("20.00")

    def test_preview_does_not_debit(self, alice):
        preview_conversion("alice", 1500)
        assert _coins("alice") == Decimal("2000")
        assert Payment.objects.count() == 0

    def test_preview_over_balance(self, alice):
        with pytest.raises(InsufficientBalance):
            preview_conversion("alice", 2001)

    def test_preview_unknown_user(self, db):
        with pytest.raises(NotFound):
            preview_conversion("nobody", 10)

    def test_preview_validates_coins_before_user_lookup(self, db):
        with pytest.raises(InvalidInput):
            preview_conversion("ghost", "abc")
        with pytest.raises(InvalidInput):
            preview_conversion("ghost", -1)

    def test_preview_missing_fields(self, alice):
        with pytest.raises(InvalidInput):
            preview_conversion("", 10)
        with pytest.raises(InvalidInput):
            preview_conversion("alice", None)


# ============================================================================
# Initiate
# ============================================================================

class TestInitiatePayment:

    def test_full_balance_conversion(self, alice):
        payment = initiate_payment("alice", 2000, rate=100)

        assert payment.status == PaymentStatus.PENDING
        assert payment.amount_usd == Decimal("20.00")
        assert payment.coins == 2000
        assert payment.confirmed_at is None
        assert payment.crypto_amount is None
        assert _coins("alice") == Decimal("0")

    def test_payment_is_persisted_with_hosted_charge(self, alice):
        payment = initiate_payment("alice", 2000)

        stored = Payment.objects.get(pk=payment.pk)
        assert stored.hosted_url.endswith(f"paymentId={payment.pk}")
        charge = StubCharge.objects.get(payment_id=payment.pk)
        assert charge.amount_usd == Decimal("20.00")

    def test_debit_matches_request(self, whale):
        initiate_payment("whale", 3500)
        assert _coins("whale") == Decimal("6500")

    def test_below_minimum(self, alice):
        with pytest.raises(OutOfRange):
            initiate_payment("alice", 1999)
        assert _coins("alice") == Decimal("2000")

    def test_above_maximum(self, whale):
        with pytest.raises(OutOfRange):
            initiate_payment("whale", 10501)

    def test_custom_bounds(self, alice):
        payment = initiate_payment("alice", 500, min_coins=100, max_coins=1000)
        assert payment.amount_usd == Decimal("5.00")

    def test_insufficient_balance(self, alice):
        with pytest.raises(InsufficientBalance):
            initiate_payment("alice", 3000)
        assert _coins("alice") == Decimal("2000")
        assert Payment.objects.count() == 0

    def test_range_checked_before_balance(self, alice):
        # 20000 is both out of range and over balance
        with pytest.raises(OutOfRange):
            initiate_payment("alice", 20000)

    def test_unknown_user_checked_before_range(self, db):
        with pytest.raises(NotFound):
            initiate_payment("ghost", 1)

    @pytest.mark.parametrize("coins", [None, "lots", 2000.5, True])
    def test_malformed_coins(self, alice, coins):
        with pytest.raises(InvalidInput):
            initiate_payment("alice", coins)

    def test_missing_user_id(self, db):
        with pytest.raises(InvalidInput):
            initiate_payment(None, 2000)

    def test_zero_coins_rejected_even_when_in_range(self, alice):
        with pytest.raises(InvalidInput):
            initiate_payment("alice", 0, min_coins=0, max_coins=100)
        assert _coins("alice") == Decimal("2000")
        assert Payment.objects.count() == 0

    def test_rate_from_settings(self, alice, settings):
        settings.COINS_PER_USD = Decimal("50")
        payment = initiate_payment("alice", 2000)
        assert payment.amount_usd == Decimal("40.00")

    def test_second_conversion_drains_balance(self, whale):
        initiate_payment("whale", 5000)
        initiate_payment("whale", 5000)
        with pytest.raises(InsufficientBalance):
            initiate_payment("whale", 2000)
        assert _coins("whale") == Decimal("0")

    def test_storage_failure_rolls_back_debit(self, alice, broken_store):
        with pytest.raises(StorageFailure):
            initiate_payment("alice", 2000, store=broken_store)
        assert _coins("alice") == Decimal("2000")
        assert Payment.objects.count() == 0

    def test_processor_failure_rolls_back_debit(self, alice, exploding_processor):
        with pytest.raises(ProcessorUnavailable):
            initiate_payment("alice", 2000, processor=exploding_processor)
        assert _coins("alice") == Decimal("2000")
        assert Payment.objects.count() == 0


# ============================================================================
# Confirm
# ============================================================================

class TestConfirmPayment:

    def test_confirm_credits_crypto_and_creates_order(self, pending_payment):
        payment, confirmed = confirm_payment(pending_payment.pk, crypto_code="BTC", price_usd=Decimal("30000"))

        assert confirmed is True
        assert payment.status == PaymentStatus.CONFIRMED
        assert payment.crypto_type == "BTC"
        assert payment.crypto_amount == Decimal("0.00066667")
        assert payment.confirmed_at is not None
        assert _btc("alice") == Decimal("0.00116667")

        order = Order.objects.get(payment=payment)
        assert order.coins_deducted == 2000
        assert order.amount_usd == Decimal("20.00")
        assert order.crypto_type == "BTC"
        assert order.crypto_amount == Decimal("0.00066667")
        assert order.status == "COMPLETED"
        assert order.user_id == "alice"

    def test_confirm_uses_configured_defaults(self, pending_payment, settings):
        settings.DEFAULT_CRYPTO = "eth"
        settings.MOCK_CRYPTO_PRICE_USD = Decimal("2000")

        payment, _ = confirm_payment(pending_payment.pk)

        assert payment.crypto_type == "ETH"
        assert payment.crypto_amount == Decimal("0.01000000")
        assert CryptoHolding.objects.get(user_id="alice", code="ETH").amount == Decimal("0.02")

    def test_new_crypto_code_opens_holding(self, pending_payment):
        confirm_payment(pending_payment.pk, crypto_code="sol", price_usd=100)
        assert CryptoHolding.objects.get(user_id="alice", code="SOL").amount == Decimal("0.2")

    def test_confirm_twice_is_idempotent(self, pending_payment):
        first, confirmed_first = confirm_payment(pending_payment.pk, price_usd=30000)
        second, confirmed_second = confirm_payment(pending_payment.pk, price_usd=1)

        assert (confirmed_first, confirmed_second) == (True, False)
        assert second.confirmed_at == first.confirmed_at
        assert second.crypto_amount == first.crypto_amount
        assert Order.objects.filter(payment_id=pending_payment.pk).count() == 1
        assert _btc("alice") == Decimal("0.00116667")

    def test_confirm_does_not_touch_coins(self, pending_payment):
        confirm_payment(pending_payment.pk)
        assert _coins("alice") == Decimal("0")

    def test_unknown_payment(self, alice):
        with pytest.raises(NotFound):
            confirm_payment("pay-missing")
        assert Order.objects.count() == 0
        assert _btc("alice") == Decimal("0.0005")

    def test_missing_payment_id(self, db):
        with pytest.raises(InvalidInput):
            confirm_payment("  ")

    def test_storage_failure_mid_confirm_applies_nothing(self, pending_payment, broken_orders_store):
        with pytest.raises(StorageFailure):
            confirm_payment(pending_payment.pk, price_usd=Decimal("30000"), store=broken_orders_store)

        pending_payment.refresh_from_db()
        assert pending_payment.status == PaymentStatus.PENDING
        assert pending_payment.confirmed_at is None
        assert pending_payment.crypto_amount is None
        assert Order.objects.count() == 0
        assert _btc("alice") == Decimal("0.0005")

    def test_orphaned_payment_stays_pending(self, pending_payment, orphan_store):
        with pytest.raises(NotFound):
            confirm_payment(pending_payment.pk, store=orphan_store)

        pending_payment.refresh_from_db()
        assert pending_payment.status == PaymentStatus.PENDING
        assert pending_payment.crypto_amount is None
        assert Order.objects.count() == 0
        assert _btc("alice") == Decimal("0.0005")


class TestConfirmationEvent:

    def test_confirm_action(self, pending_payment):
        payment, confirmed = process_confirmation_event(pending_payment.pk, "confirm")
        assert confirmed is True
        assert payment.status == PaymentStatus.CONFIRMED

    def test_processor_native_action(self, pending_payment):
        _, confirmed = process_confirmation_event(pending_payment.pk, "charge:confirmed")
        assert confirmed is True

    def test_unknown_action_mutates_nothing(self, pending_payment):
        with pytest.raises(InvalidInput):
            process_confirmation_event(pending_payment.pk, "refund")

        pending_payment.refresh_from_db()
        assert pending_payment.status == PaymentStatus.PENDING
        assert Order.objects.count() == 0

    def test_redelivery_after_confirm_ignores_action(self, pending_payment):
        process_confirmation_event(pending_payment.pk, "confirm")
        payment, confirmed = process_confirmation_event(pending_payment.pk, "anything")
        assert confirmed is False
        assert Order.objects.count() == 1

    def test_unknown_payment(self, db):
        with pytest.raises(NotFound):
            process_confirmation_event("pay-missing", "confirm")


# ============================================================================
# Queries
# ============================================================================

class TestQueries:

    def test_list_payments_most_recent_first(self, whale):
        older = initiate_payment("whale", 2000)
        newer = initiate_payment("whale", 2000)
        Payment.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(hours=1))

        assert [p.pk for p in list_collection("payments")] == [newer.pk, older.pk]

    def test_list_users(self, alice, whale):
        assert {u.pk for u in list_collection("users")} == {"alice", "whale"}

    def test_unknown_collection(self, db):
        with pytest.raises(NotFound):
            list_collection("ledger")

    def test_every_confirmed_payment_has_one_matching_order(self, whale):
        payments = [initiate_payment("whale", n) for n in (2000, 2500, 3000)]
        for p in payments[:2]:
            confirm_payment(p.pk)
            confirm_payment(p.pk)

        for p in Payment.objects.filter(status=PaymentStatus.CONFIRMED):
            orders = Order.objects.filter(payment=p)
            assert orders.count() == 1
            assert orders[0].coins_deducted == p.coins
            assert orders[0].amount_usd == p.amount_usd
        assert Order.objects.count() == 2

    def test_summary_consistent(self, pending_payment):
        confirm_payment(pending_payment.pk)
        summary = ledger_summary()

        assert summary["consistent"] is True
        assert summary["payments"] == {"confirmed": 1, "pending": 0, "coins_committed": "2000"}
        assert summary["orders"]["matches_confirmed"] is True

    def test_summary_flags_unbalanced_user(self, whale):
        summary = ledger_summary()
        assert summary["users"]["unbalanced"] == ["whale"]
        assert summary["consistent"] is False
