from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_email", models.EmailField(blank=True, max_length=254)),
                ("user_name", models.CharField(max_length=150)),
                ("date", models.DateField()),
                ("slot", models.PositiveSmallIntegerField()),
                ("band_name", models.CharField(max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("cancelled", models.BooleanField(default=False)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_by_email", models.EmailField(blank=True, max_length=254)),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["date", "slot", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="CancellationRequest",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_email", models.EmailField(blank=True, max_length=254)),
                ("user_name", models.CharField(max_length=150)),
                ("date", models.DateField()),
                ("slot", models.PositiveSmallIntegerField()),
                ("band_name", models.CharField(max_length=100)),
                ("reason", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("auto_approved", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("admin_response", models.TextField(blank=True)),
                ("admin_response_at", models.DateTimeField(blank=True, null=True)),
                ("admin_email", models.EmailField(blank=True, max_length=254)),
                (
                    "admin",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cancellation_requests",
                        to="reservations.booking",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cancellation_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.AddIndex(
            model_name="booking",
            index=models.Index(fields=["user", "date"], name="idx_booking_user_date"),
        ),
        migrations.AddIndex(
            model_name="booking",
            index=models.Index(fields=["date", "slot"], name="idx_booking_date_slot"),
        ),
        migrations.AddConstraint(
            model_name="booking",
            constraint=models.UniqueConstraint(
                condition=models.Q(("cancelled", False)),
                fields=("date", "slot"),
                name="unique_active_booking_date_slot",
            ),
        ),
        migrations.AddIndex(
            model_name="cancellationrequest",
            index=models.Index(fields=["date"], name="idx_cancel_req_date"),
        ),
        migrations.AddIndex(
            model_name="cancellationrequest",
            index=models.Index(fields=["status"], name="idx_cancel_req_status"),
        ),
        migrations.AddConstraint(
            model_name="cancellationrequest",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status", "pending")),
                fields=("booking",),
                name="unique_pending_cancellation_per_booking",
            ),
        ),
    ]
