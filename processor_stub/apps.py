from django.apps import AppConfig


class ProcessorStubConfig(AppConfig):
	name = "processor_stub"
	verbose_name = "Hosted charge stub"
