"""Business orchestration for the exchange.

This module coordinates: register → preview → charge (coin debit) → confirm
(crypto credit + order). Every mutation runs inside one LedgerStore unit of work
with the affected rows locked, so concurrent requests never interleave a
read-then-write on the same user or payment.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from .adapters.price_adapter import get_price_feed
from .adapters.processor_adapter import get_processor
from .conversions import estimate, to_decimal, usd_to_crypto
from .errors import InsufficientBalance, InvalidInput, LedgerError, OutOfRange, ProcessorUnavailable
from .models import CryptoHolding, Order, OrderStatus, Payment, PaymentStatus, User
from .store import default_store

logger = logging.getLogger(__name__)

# Event actions from the processor that mean "this charge was paid".
CONFIRM_ACTIONS = ("confirm", "charge:confirmed")


def _require_id(value, field: str) -> str:
	if value is None or not str(value).strip():
		raise InvalidInput(f"{field} required")
	return str(value).strip()


def _require_int(value, field: str) -> int:
	amount = to_decimal(value, field)
	if amount != amount.to_integral_value():
		raise InvalidInput(f"{field} must be a whole number")
	if amount <= 0:
		raise InvalidInput(f"{field} must be positive")
	return int(amount)


def register_user(*, user_id=None, name=None, email=None, store=None) -> User:
	"""
	Create a user with the starting coin grant and starter crypto holdings
	"""
	store = store or default_store
	with store.atomic():
		user = User(name=name or "User", email=email or "", coins=settings.STARTING_COINS)
		user_id = str(user_id or "").strip()
		if user_id:
			user.id = user_id
			if User.objects.filter(pk=user.id).exists():
				raise InvalidInput("user exists")
		try:
			with transaction.atomic():
				store.upsert("users", user)
		except IntegrityError:
			# Another request registered the same id between the check and the insert
			raise InvalidInput("user exists")
		CryptoHolding.objects.bulk_create([
			CryptoHolding(user=user, code=code.upper(), amount=amount)
			for code, amount in settings.STARTER_CRYPTO.items()
		])
	logger.info("registered user %s with %s coins", user.id, user.coins)
	return user


def preview_conversion(user_id, coins, *, rate=None, store=None) -> Decimal:
	"""
	USD a user would get for `coins`. Checks the balance, mutates nothing.
	"""
	store = store or default_store
	user_id = _require_id(user_id, "user_id")
	coins = to_decimal(coins, "coins")
	if coins < 0:
		raise InvalidInput("coins must be non-negative")
	user = store.get("users", user_id)
	if coins > user.coins:
		raise InsufficientBalance()
	return estimate(coins, rate if rate is not None else settings.COINS_PER_USD)


def initiate_payment(user_id, coins, *, rate=None, min_coins=None, max_coins=None, processor=None, store=None) -> Payment:
	"""
	Debit `coins` from the user and open a PENDING payment with a hosted charge.

	Order of checks: presence → user exists → bounds → balance. The balance
	check, debit, payment row and charge request share one unit of work; if
	any step fails nothing is applied.
	"""
	store = store or default_store
	processor = processor or get_processor()
	rate = rate if rate is not None else settings.COINS_PER_USD
	min_coins = settings.MIN_CONVERSION_COINS if min_coins is None else min_coins
	max_coins = settings.MAX_CONVERSION_COINS if max_coins is None else max_coins

	user_id = _require_id(user_id, "user_id")
	coins = _require_int(coins, "coins")

	with store.atomic():
		user = store.lock_user(user_id)

		if coins < min_coins or coins > max_coins:
			raise OutOfRange(f"coins must be {min_coins}–{max_coins}")
		if coins > user.coins:
			raise InsufficientBalance()

		amount_usd = estimate(coins, rate)

		# Conditional update guards the balance even if the row lock is a no-op
		if not store.debit_coins(user, coins):
			raise InsufficientBalance()

		payment = Payment(user=user, coins=coins, amount_usd=amount_usd, status=PaymentStatus.PENDING)
		store.upsert("payments", payment)

		try:
			receipt = processor.create_charge(payment)
		except LedgerError:
			raise
		except Exception as exc:
			logger.exception("charge creation failed for payment %s; debit rolled back", payment.id)
			raise ProcessorUnavailable() from exc
		payment.hosted_url = receipt["hosted_url"]
		payment.save(update_fields=["hosted_url"])

	logger.info("payment %s pending: user=%s coins=%s usd=%s", payment.id, user.id, coins, amount_usd)
	return payment


def confirm_payment(payment_id, *, crypto_code=None, price_usd=None, price_feed=None, store=None):
	"""
	PENDING → CONFIRMED exactly once: credit crypto and append the Order.

	Returns (payment, confirmed) where confirmed is False when the payment was
	already confirmed and nothing changed.
	"""
	store = store or default_store
	payment_id = _require_id(payment_id, "payment_id")
	code = (crypto_code or settings.DEFAULT_CRYPTO).upper()

	with store.atomic():
		payment = store.lock_payment(payment_id)
		if payment.status == PaymentStatus.CONFIRMED:
			logger.info("payment %s already confirmed; ignoring", payment.id)
			return payment, False

		if price_usd is None:
			price_usd = (price_feed or get_price_feed()).get_price(code)
		crypto_amount = usd_to_crypto(payment.amount_usd, price_usd)

		# Never confirm without somewhere to put the crypto
		user = store.lock_user(payment.user_id)

		store.credit_crypto(user, code, crypto_amount)

		payment.status = PaymentStatus.CONFIRMED
		payment.confirmed_at = timezone.now()
		payment.crypto_type = code
		payment.crypto_amount = crypto_amount
		payment.save(update_fields=["status", "confirmed_at", "crypto_type", "crypto_amount"])

		order = Order(
			user=user,
			payment=payment,
			coins_deducted=payment.coins,
			amount_usd=payment.amount_usd,
			crypto_type=code,
			crypto_amount=crypto_amount,
			status=OrderStatus.COMPLETED,
		)
		store.upsert("orders", order)

	logger.info("payment %s confirmed: %s %s credited to %s (order %s)", payment.id, crypto_amount, code, user.id, order.id)
	return payment, True


def process_confirmation_event(payment_id, action, **kwargs):
	"""
	Processor webhook entrypoint. Already-confirmed payments short-circuit
	before the action is looked at, so redelivered events are harmless.
	"""
	store = kwargs.get("store") or default_store
	payment_id = _require_id(payment_id, "payment_id")
	payment = store.get("payments", payment_id)
	if payment.status == PaymentStatus.CONFIRMED:
		return payment, False
	if action not in CONFIRM_ACTIONS:
		logger.warning("unknown action %r for payment %s", action, payment_id)
		raise InvalidInput("unknown action")
	return confirm_payment(payment_id, **kwargs)


def list_collection(collection, *, store=None) -> list:
	"""
	Read-only full scan of users / payments / orders
	"""
	store = store or default_store
	return store.list_all(collection)


def ledger_summary() -> dict:
	"""
	Consistency snapshot: one order per confirmed payment, and for each user
	coins + committed coins == starting grant.
	"""
	confirmed = Payment.objects.filter(status=PaymentStatus.CONFIRMED).count()
	pending = Payment.objects.filter(status=PaymentStatus.PENDING).count()
	orders = Order.objects.count()
	committed = Payment.objects.aggregate(s=Sum("coins"))["s"] or 0

	# Orders whose recorded amounts drifted from their payment
	mismatched = [
		o.id for o in Order.objects.select_related("payment")
		if o.coins_deducted != o.payment.coins or o.amount_usd != o.payment.amount_usd
	]

	unbalanced = []
	users = User.objects.annotate(committed=Sum("payments__coins"))
	for u in users:
		if u.coins + (u.committed or 0) != settings.STARTING_COINS:
			unbalanced.append(u.id)

	return {
		"payments": {
			"confirmed": confirmed,
			"pending": pending,
			"coins_committed": str(committed),
		},
		"orders": {
			"count": orders,
			"matches_confirmed": orders == confirmed,
			"mismatched": mismatched,
		},
		"users": {
			"count": len(users),
			"unbalanced": unbalanced,
		},
		"consistent": orders == confirmed and not mismatched and not unbalanced,
	}
