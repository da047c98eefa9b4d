import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("listings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BookingRequest",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("pending_payment", "Pending Payment"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the booking (managed by FSM)",
                        max_length=50,
                    ),
                ),
                ("requested_date", models.DateField(help_text="Requested check-in date")),
                (
                    "duration_months",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Requested stay length in months",
                        null=True,
                    ),
                ),
                (
                    "message",
                    models.TextField(
                        blank=True, default="", help_text="Seeker's note to the provider"
                    ),
                ),
                (
                    "response_message",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Reply recorded when the booking was approved or rejected",
                    ),
                ),
                (
                    "responded_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the booking was approved or rejected",
                        null=True,
                    ),
                ),
                (
                    "cancelled_at",
                    models.DateTimeField(
                        blank=True, help_text="When the booking was cancelled", null=True
                    ),
                ),
                (
                    "cancellation_reason",
                    models.TextField(
                        blank=True, default="", help_text="Why the booking was cancelled"
                    ),
                ),
                (
                    "listing",
                    models.ForeignKey(
                        help_text="Listing being booked",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking_requests",
                        to="listings.listing",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider who owns the listing",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_booking_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seeker",
                    models.ForeignKey(
                        help_text="Seeker who made the request",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking Request",
                "verbose_name_plural": "Booking Requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["seeker", "status"], name="bookings_bo_seeker__8f1c2a_idx"
                    ),
                    models.Index(
                        fields=["provider", "status"], name="bookings_bo_provide_4b7e90_idx"
                    ),
                    models.Index(
                        fields=["listing", "status"], name="bookings_bo_listing_d3a5f1_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("status__in", ["pending", "pending_payment", "approved"])
                        ),
                        fields=("seeker", "listing"),
                        name="unique_active_booking_per_seeker_listing",
                    )
                ],
            },
        ),
    ]
