"""Database models for the coin exchange.


Tables:
- User: coin balance holder (coins only ever decrease in this core)
- CryptoHolding: per-user, per-code crypto balance (only ever increases)
- PaymentStatus
- Payment: a coin debit awaiting processor confirmation
- OrderStatus
- Order: append-only record of a confirmed payment, one per payment
"""

import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone


def gen_user_id():
	# Named functions = migration-friendly
	return f"user-{uuid.uuid4().hex[:12]}"


def gen_payment_id():
	return f"pay-{uuid.uuid4().hex[:16]}"


def gen_order_id():
	return f"order-{uuid.uuid4().hex[:16]}"


class User(models.Model):
	"""
	Exchange user; coins are debited when a conversion is requested
	"""
	id = models.CharField(primary_key=True, max_length=64, default=gen_user_id, editable=False)
	name = models.CharField(max_length=200, default="User")
	email = models.CharField(max_length=254, blank=True, default="")
	coins = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
	created_at = models.DateTimeField(default=timezone.now)

	class Meta:
		ordering = ["-created_at"]
		constraints = [
			models.CheckConstraint(condition=models.Q(coins__gte=0), name="user_coins_non_negative"),
		]

	@property
	def crypto(self) -> dict:
		return {h.code: h.amount for h in self.holdings.all()}


class CryptoHolding(models.Model):
	"""
	One row per (user, currency code)
	"""
	id = models.BigAutoField(primary_key=True)
	user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="holdings")
	code = models.CharField(max_length=16)
	amount = models.DecimalField(max_digits=24, decimal_places=8, default=Decimal("0"))

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["user", "code"], name="unique_holding_per_code"),
			models.CheckConstraint(condition=models.Q(amount__gte=0), name="holding_amount_non_negative"),
		]


class PaymentStatus(models.TextChoices):
	PENDING = "PENDING", "Pending"
	CONFIRMED = "CONFIRMED", "Confirmed"


class Payment(models.Model):
	"""
	Coins already debited from the user, waiting for the processor to confirm.

	crypto_type / crypto_amount / confirmed_at are set together, once, on confirm.
	"""
	id = models.CharField(primary_key=True, max_length=64, default=gen_payment_id, editable=False)
	user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="payments")
	coins = models.PositiveIntegerField()
	amount_usd = models.DecimalField(max_digits=18, decimal_places=2)
	status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
	hosted_url = models.CharField(max_length=500, blank=True, default="")
	created_at = models.DateTimeField(default=timezone.now)
	confirmed_at = models.DateTimeField(null=True, blank=True)
	crypto_type = models.CharField(max_length=16, blank=True, default="")
	crypto_amount = models.DecimalField(max_digits=24, decimal_places=8, null=True, blank=True)

	class Meta:
		ordering = ["-created_at"]
		constraints = [
			models.CheckConstraint(condition=models.Q(coins__gt=0), name="payment_coins_positive"),
		]
		indexes = [
			models.Index(fields=["status"], name="payment_status_idx"),
		]


class OrderStatus(models.TextChoices):
	COMPLETED = "COMPLETED", "Completed"


class Order(models.Model):
	"""
	Immutable receipt of a confirmed payment. payment is one-to-one so a second
	order for the same payment is rejected by the database.
	"""
	id = models.CharField(primary_key=True, max_length=64, default=gen_order_id, editable=False)
	user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="orders")
	payment = models.OneToOneField(Payment, on_delete=models.PROTECT, related_name="order")
	coins_deducted = models.PositiveIntegerField()
	amount_usd = models.DecimalField(max_digits=18, decimal_places=2)
	crypto_type = models.CharField(max_length=16)
	crypto_amount = models.DecimalField(max_digits=24, decimal_places=8)
	status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.COMPLETED)
	created_at = models.DateTimeField(default=timezone.now)

	class Meta:
		ordering = ["-created_at"]
