"""Application errors raised by the ledger services.

Every error carries a machine-readable ``kind`` and a human-readable message.
Views translate them to JSON responses; nothing here knows about HTTP.
"""


class LedgerError(Exception):
	kind = "ledger_error"
	default_message = "ledger error"

	def __init__(self, message: str | None = None):
		self.message = message or self.default_message
		super().__init__(self.message)

	def as_dict(self) -> dict:
		return {"error": self.kind, "message": self.message}


class InvalidInput(LedgerError):
	"""Missing or malformed request fields."""
	kind = "invalid_input"
	default_message = "invalid input"


class NotFound(LedgerError):
	"""Referenced user, payment or collection does not exist."""
	kind = "not_found"
	default_message = "not found"


class OutOfRange(LedgerError):
	kind = "out_of_range"
	default_message = "amount outside allowed range"


class InsufficientBalance(LedgerError):
	kind = "insufficient_balance"
	default_message = "insufficient coins"


class StorageFailure(LedgerError):
	"""A durable read or write failed; the unit of work was rolled back."""
	kind = "storage_failure"
	default_message = "storage unavailable"


class ProcessorUnavailable(LedgerError):
	"""The payment processor could not create a charge; nothing was debited."""
	kind = "processor_unavailable"
	default_message = "payment processor unavailable"
