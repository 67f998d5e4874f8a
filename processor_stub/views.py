"""HTTP endpoints for the processor stub, mirroring what a real provider exposes
(hosted charge lookup, spot price)."""

from django.http import JsonResponse
from django.conf import settings

from api.responses import error_response
from core.errors import NotFound
from .models import StubCharge


def charge_detail(request, reference: str):
	"""
	GET: A recorded hosted charge
	"""
	try:
		charge = StubCharge.objects.get(reference=reference)
	except StubCharge.DoesNotExist:
		return error_response(NotFound("charge not found"))
	return JsonResponse({
		"ok": True,
		"reference": charge.reference,
		"payment_id": charge.payment_id,
		"amount_usd": f"{charge.amount_usd:.2f}",
		"hosted_url": charge.hosted_url,
		"created_at": charge.created_at.isoformat(),
		"simulated": True,
	})


def price(request, code: str):
	"""
	GET: Mock USD price for one unit of `code`
	"""
	return JsonResponse({
		"ok": True,
		"code": code.upper(),
		"price_usd": str(settings.MOCK_CRYPTO_PRICE_USD),
		"simulated": True,
	})
