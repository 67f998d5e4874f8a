"""Adapter over the price feed. The stub returns the configured mock price."""

from decimal import Decimal

from django.conf import settings
from django.utils.module_loading import import_string


class PriceFeedAdapter:
	provider_name = "stub-price-feed"

	@staticmethod
	def get_price(code: str) -> Decimal:
		"""
		USD per one unit of `code`; the stub ignores the code
		"""
		return Decimal(str(settings.MOCK_CRYPTO_PRICE_USD))


def get_price_feed():
	return import_string(settings.PRICE_FEED)
