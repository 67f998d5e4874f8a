"""Public API surface.

- /register: demo helper creating a user with starter coins
- /convert: coin → USD preview
- /coinbase-charge: debit coins, open a pending payment
- /users, /payments, /orders, /collections/<name>: read-only views
- /debug/summary: ledger consistency snapshot
"""

from django.urls import path
from .views_demo import register
from .views_ops import health, convert, charge
from .views_read import users, payments, orders, collection, debug_summary


urlpatterns = [
	path("health", health),
	path("register", register),
	path("convert", convert),
	path("coinbase-charge", charge),
	path("users", users),
	path("payments", payments),
	path("orders", orders),
	path("collections/<str:name>", collection),
	path("debug/summary", debug_summary),
]
