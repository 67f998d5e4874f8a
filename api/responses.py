"""Shared helpers for turning request bodies and ledger errors into JSON."""

import json
import logging

from django.http import JsonResponse

from core.errors import InvalidInput, LedgerError, NotFound, ProcessorUnavailable, StorageFailure

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
	InvalidInput: 400,
	NotFound: 404,
	StorageFailure: 503,
	ProcessorUnavailable: 503,
}


def parse_json(request) -> dict:
	try:
		body = json.loads((request.body or b"{}").decode("utf-8"))
	except (ValueError, UnicodeDecodeError):
		raise InvalidInput("Invalid JSON")
	if not isinstance(body, dict):
		raise InvalidInput("JSON object expected")
	return body


def error_response(exc: LedgerError) -> JsonResponse:
	status = next((code for cls, code in STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400)
	if status >= 500:
		logger.error("request failed: %s", exc.kind)
	return JsonResponse({"ok": False, **exc.as_dict()}, status=status)
