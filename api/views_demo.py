"""Demo helper: register a user with the starting coin and crypto grant."""

from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt

from core.errors import LedgerError
from core.serializers import user_to_dict
from core.services import register_user
from .forms import RegisterForm, validated
from .responses import error_response, parse_json


@csrf_exempt
def register(request):
	"""
	POST: Create a user holding STARTING_COINS and the starter crypto
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		data = validated(RegisterForm, parse_json(request))
		user = register_user(user_id=data["id"], name=data["name"], email=data["email"])
	except LedgerError as e:
		return error_response(e)
	return JsonResponse({"ok": True, "user": user_to_dict(user)}, status=201)
