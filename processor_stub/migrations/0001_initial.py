import django.utils.timezone
import processor_stub.models
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StubCharge",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reference", models.CharField(default=processor_stub.models.gen_charge_reference, max_length=32, unique=True)),
                ("payment_id", models.CharField(db_index=True, max_length=64)),
                ("amount_usd", models.DecimalField(decimal_places=2, max_digits=18)),
                ("hosted_url", models.CharField(max_length=500)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
        ),
    ]
