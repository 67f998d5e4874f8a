"""Read-only endpoints to inspect ledger state (users, payments, orders)."""

from django.http import JsonResponse

from core.errors import LedgerError
from core.serializers import serialize
from core.services import ledger_summary, list_collection
from .responses import error_response


def collection(request, name: str):
	"""
	GET: Every record of a collection, most recent first
	"""
	try:
		records = list_collection(name)
	except LedgerError as e:
		return error_response(e)
	return JsonResponse({"ok": True, name: serialize(name, records)})


def users(request):
	return collection(request, "users")


def payments(request):
	return collection(request, "payments")


def orders(request):
	return collection(request, "orders")


def debug_summary(request):
	# Should report consistent=true whenever every request completed or rolled back
	return JsonResponse({"ok": True, **ledger_summary()})
