import core.models
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.CharField(default=core.models.gen_user_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(default="User", max_length=200)),
                ("email", models.CharField(blank=True, default="", max_length=254)),
                ("coins", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("coins__gte", 0)), name="user_coins_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.CharField(default=core.models.gen_payment_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ("coins", models.PositiveIntegerField()),
                ("amount_usd", models.DecimalField(decimal_places=2, max_digits=18)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("CONFIRMED", "Confirmed")], default="PENDING", max_length=16)),
                ("hosted_url", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("crypto_type", models.CharField(blank=True, default="", max_length=16)),
                ("crypto_amount", models.DecimalField(blank=True, decimal_places=8, max_digits=24, null=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="core.user")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="payment_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("coins__gt", 0)), name="payment_coins_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.CharField(default=core.models.gen_order_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ("coins_deducted", models.PositiveIntegerField()),
                ("amount_usd", models.DecimalField(decimal_places=2, max_digits=18)),
                ("crypto_type", models.CharField(max_length=16)),
                ("crypto_amount", models.DecimalField(decimal_places=8, max_digits=24)),
                ("status", models.CharField(choices=[("COMPLETED", "Completed")], default="COMPLETED", max_length=16)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("payment", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="order", to="core.payment")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="core.user")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="CryptoHolding",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=16)),
                ("amount", models.DecimalField(decimal_places=8, default=Decimal("0"), max_digits=24)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="holdings", to="core.user")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("user", "code"), name="unique_holding_per_code"),
                    models.CheckConstraint(condition=models.Q(("amount__gte", 0)), name="holding_amount_non_negative"),
                ],
            },
        ),
    ]
