"""Operational endpoints that move a conversion forward (preview/charge/confirm)."""

import logging

from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt

from core.adapters.processor_adapter import get_processor
from core.errors import LedgerError
from core.serializers import payment_to_dict
from core.services import initiate_payment, preview_conversion, process_confirmation_event
from .forms import ChargeForm, ConvertForm, WebhookForm, validated
from .responses import error_response, parse_json

logger = logging.getLogger(__name__)


def health(request):
	return JsonResponse({"ok": True})


@csrf_exempt
def convert(request):
	"""
	POST: USD preview for a coin amount; nothing is debited
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		data = validated(ConvertForm, parse_json(request))
		usd = preview_conversion(data["user_id"], data["coins"])
	except LedgerError as e:
		return error_response(e)
	return JsonResponse({"ok": True, "usd": f"{usd:.2f}"})


@csrf_exempt
def charge(request):
	"""
	POST: Debit coins, open a PENDING payment and return the hosted charge URL
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		data = validated(ChargeForm, parse_json(request))
		processor = get_processor()
		payment = initiate_payment(data["user_id"], data["coins"], processor=processor)
	except LedgerError as e:
		return error_response(e)
	return JsonResponse({
		"ok": True,
		"payment": payment_to_dict(payment),
		"hosted_url": payment.hosted_url,
		"simulated": getattr(processor, "simulated", False),
	}, status=201)


# --- Webhooks ----------------------------------------------------------------

@csrf_exempt
def processor_webhook(request):
	"""
	Processor confirmation callback. Body format (example):
	{
	  "payment_id": "pay-…",
	  "action": "confirm"            // or "charge:confirmed"
	}
	Redelivery of an event for a confirmed payment is acknowledged, not replayed.
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST required")
	try:
		data = validated(WebhookForm, parse_json(request))
		logger.info("processor event %r for %s", data["action"], data["payment_id"])
		payment, confirmed = process_confirmation_event(data["payment_id"], data["action"])
	except LedgerError as e:
		return error_response(e)

	if not confirmed:
		return JsonResponse({"ok": True, "message": "already confirmed", "payment": payment_to_dict(payment)})
	return JsonResponse({"ok": True, "message": "payment confirmed", "payment": payment_to_dict(payment)})
