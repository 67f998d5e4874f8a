"""Adapter over the local hosted-charge stub.

In production, this would create a charge with the payment processor over HTTP
(API key, retries) and return its hosted checkout URL. Here we record the charge
in the stub's table so the flow is deterministic and inspectable.
"""

from django.conf import settings
from django.utils.module_loading import import_string

from processor_stub.models import StubCharge


class ProcessorAdapter:
	"""
	create_charge(payment) -> {"reference", "hosted_url", "simulated"}
	"""

	provider_name = "stub-processor"
	simulated = True

	@staticmethod
	def create_charge(payment) -> dict:
		"""
		Register a hosted charge for a pending payment and return its receipt
		"""
		base_url = settings.HOSTED_CHARGE_BASE_URL
		charge = StubCharge.objects.create(
			payment_id=payment.pk,
			amount_usd=payment.amount_usd,
			hosted_url=f"{base_url}?paymentId={payment.pk}",
		)
		return {
			"reference": charge.reference,
			"hosted_url": charge.hosted_url,
			"simulated": True,
		}


def get_processor():
	return import_string(settings.PAYMENT_PROCESSOR)
