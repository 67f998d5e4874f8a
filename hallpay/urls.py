"""URL routing for the API, the processor webhook and the local processor stub.


The /api/ namespace exposes conversion operations; /stub/processor/ exposes the
deterministic hosted-charge stub used by the adapters. In production, the stub
is replaced by the real payment processor.
"""

from django.urls import path, include
from api.views_ops import processor_webhook


urlpatterns = [
	path("api/", include("api.urls")),
	path("webhook/coinbase-commerce", processor_webhook, name="processor_webhook"),
	path("stub/processor/", include("processor_stub.urls")),
]
