"""Deterministic in-process payment processor.

Keeps an append-only log of hosted charges so the exchange can create charges
and inspect them without network calls.
"""

import uuid
from django.db import models
from django.utils.timezone import now


def gen_charge_reference():
	# Named function = migration-friendly
	return f"CHG-{uuid.uuid4().hex[:8].upper()}"


class StubCharge(models.Model):
	"""
	One hosted charge per pending payment
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	reference = models.CharField(max_length=32, unique=True, default=gen_charge_reference)
	payment_id = models.CharField(max_length=64, db_index=True)
	amount_usd = models.DecimalField(max_digits=18, decimal_places=2)
	hosted_url = models.CharField(max_length=500)
	created_at = models.DateTimeField(default=now)
