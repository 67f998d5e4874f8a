"""Request schemas. Bodies are validated here before any service runs."""

from django import forms

from core.errors import InvalidInput


class RegisterForm(forms.Form):
	id = forms.CharField(max_length=64, required=False)
	name = forms.CharField(max_length=200, required=False)
	email = forms.CharField(max_length=254, required=False)


class ConvertForm(forms.Form):
	user_id = forms.CharField(max_length=64)
	coins = forms.DecimalField(min_value=0, max_digits=18, decimal_places=2)


class ChargeForm(forms.Form):
	user_id = forms.CharField(max_length=64)
	coins = forms.IntegerField(min_value=1)


class WebhookForm(forms.Form):
	payment_id = forms.CharField(max_length=64)
	action = forms.CharField(max_length=64, required=False)


def validated(form_class, data: dict) -> dict:
	"""
	Bind `data` to the form and return cleaned_data, or raise InvalidInput
	naming the offending fields.
	"""
	form = form_class(data)
	if not form.is_valid():
		problems = "; ".join(
			f"{field}: {' '.join(errors)}" for field, errors in form.errors.items()
		)
		raise InvalidInput(problems)
	return form.cleaned_data
