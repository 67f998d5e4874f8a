"""Ledger store: the storage seam the services are written against.

Wraps the ORM behind get / list_all / upsert plus the locking primitives the
services need for read-modify-write work. Every multi-record mutation runs in
``atomic()``, which rolls back the whole unit and raises StorageFailure when the
database fails.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction
from django.db.models import F

from .errors import NotFound, StorageFailure
from .models import CryptoHolding, Order, Payment, User

logger = logging.getLogger(__name__)


class LedgerStore:
	"""
	Users / payments / orders keyed by id. One instance per process is enough;
	the ORM manages connections per thread.
	"""

	collections = {
		"users": User,
		"payments": Payment,
		"orders": Order,
	}

	def model_for(self, collection: str):
		try:
			return self.collections[collection]
		except KeyError:
			raise NotFound(f"unknown collection: {collection}")

	@contextmanager
	def atomic(self):
		"""
		One unit of work: all writes inside become visible together or not at all
		"""
		try:
			with transaction.atomic():
				yield
		except DatabaseError as exc:
			logger.exception("ledger write failed; unit of work rolled back")
			raise StorageFailure() from exc

	def get(self, collection: str, record_id):
		model = self.model_for(collection)
		try:
			return model.objects.get(pk=record_id)
		except model.DoesNotExist:
			raise NotFound(f"{model._meta.model_name} not found")
		except DatabaseError as exc:
			logger.exception("ledger read failed")
			raise StorageFailure() from exc

	def list_all(self, collection: str) -> list:
		"""
		Full scan, most recent first
		"""
		model = self.model_for(collection)
		qs = model.objects.order_by("-created_at", "-pk")
		if model is User:
			qs = qs.prefetch_related("holdings")
		try:
			return list(qs)
		except DatabaseError as exc:
			logger.exception("ledger scan failed")
			raise StorageFailure() from exc

	def upsert(self, collection: str, record):
		model = self.model_for(collection)
		if not isinstance(record, model):
			raise TypeError(f"{collection} stores {model.__name__} records")
		record.save()
		return record

	# --- Locked reads for read-modify-write (call inside atomic()) -----------

	def lock_user(self, user_id) -> User:
		try:
			return User.objects.select_for_update().get(pk=user_id)
		except User.DoesNotExist:
			raise NotFound("user not found")

	def lock_payment(self, payment_id) -> Payment:
		try:
			return Payment.objects.select_for_update().get(pk=payment_id)
		except Payment.DoesNotExist:
			raise NotFound("payment not found")

	def debit_coins(self, user: User, coins) -> bool:
		"""
		Conditional decrement; False when the balance would go negative
		"""
		updated = User.objects.filter(pk=user.pk, coins__gte=coins).update(coins=F("coins") - coins)
		if updated:
			user.refresh_from_db(fields=["coins"])
		return bool(updated)

	def credit_crypto(self, user: User, code: str, amount) -> CryptoHolding:
		holding, _ = CryptoHolding.objects.select_for_update().get_or_create(user=user, code=code)
		holding.amount = holding.amount + amount
		holding.save(update_fields=["amount"])
		return holding


default_store = LedgerStore()
