from django.urls import path
from .views import charge_detail, price


urlpatterns = [
	path("charges/<str:reference>", charge_detail),
	path("prices/<str:code>", price),
]
