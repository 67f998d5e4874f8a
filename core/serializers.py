"""JSON-ready projections of ledger records. Amounts are fixed-point strings."""


def _ts(value):
	return value.isoformat() if value else None


def user_to_dict(user) -> dict:
	return {
		"id": user.id,
		"name": user.name,
		"email": user.email,
		"coins": f"{user.coins:.2f}",
		"crypto": {code: f"{amount:.8f}" for code, amount in sorted(user.crypto.items())},
		"created_at": _ts(user.created_at),
	}


def payment_to_dict(payment) -> dict:
	return {
		"id": payment.id,
		"user_id": payment.user_id,
		"coins": payment.coins,
		"amount_usd": f"{payment.amount_usd:.2f}",
		"status": payment.status,
		"hosted_url": payment.hosted_url,
		"created_at": _ts(payment.created_at),
		"confirmed_at": _ts(payment.confirmed_at),
		"crypto_type": payment.crypto_type or None,
		"crypto_amount": f"{payment.crypto_amount:.8f}" if payment.crypto_amount is not None else None,
	}


def order_to_dict(order) -> dict:
	return {
		"id": order.id,
		"user_id": order.user_id,
		"payment_id": order.payment_id,
		"coins_deducted": order.coins_deducted,
		"amount_usd": f"{order.amount_usd:.2f}",
		"crypto_type": order.crypto_type,
		"crypto_amount": f"{order.crypto_amount:.8f}",
		"status": order.status,
		"created_at": _ts(order.created_at),
	}


SERIALIZERS = {
	"users": user_to_dict,
	"payments": payment_to_dict,
	"orders": order_to_dict,
}


def serialize(collection: str, records) -> list:
	to_dict = SERIALIZERS[collection]
	return [to_dict(r) for r in records]
