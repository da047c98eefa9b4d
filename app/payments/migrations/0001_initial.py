import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
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
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        ("listings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ConnectedAccount",
            fields=_base_fields()
            + [
                (
                    "stripe_account_id",
                    models.CharField(
                        help_text="Stripe Connect Account ID (acct_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "charges_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Whether Stripe has enabled charges for this account",
                    ),
                ),
                (
                    "payouts_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Whether Stripe has enabled payouts for this account",
                    ),
                ),
                (
                    "details_submitted",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the provider submitted onboarding details",
                    ),
                ),
                (
                    "requirements",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Outstanding requirements: currently_due, eventually_due, past_due",
                    ),
                ),
                (
                    "disabled_reason",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Stripe's disabled_reason, empty when not disabled",
                        max_length=255,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("restricted", "Restricted"),
                            ("enabled", "Enabled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Derived account status",
                        max_length=20,
                    ),
                ),
                (
                    "country",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Two-letter account country",
                        max_length=2,
                    ),
                ),
                (
                    "provider",
                    models.OneToOneField(
                        help_text="Provider this connected account belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="connected_account",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Connected Account",
                "verbose_name_plural": "Connected Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PaymentIntent",
            fields=_base_fields()
            + [
                (
                    "stripe_payment_intent_id",
                    models.CharField(
                        help_text="Stripe PaymentIntent ID (pi_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "amount",
                    models.PositiveIntegerField(
                        help_text="Total charge in whole currency units"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="inr",
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requires_payment_method", "Requires Payment Method"),
                            ("requires_confirmation", "Requires Confirmation"),
                            ("requires_action", "Requires Action"),
                            ("processing", "Processing"),
                            ("requires_capture", "Requires Capture"),
                            ("succeeded", "Succeeded"),
                            ("canceled", "Canceled"),
                        ],
                        db_index=True,
                        default="requires_payment_method",
                        help_text="Stripe's status for this intent",
                        max_length=32,
                    ),
                ),
                (
                    "purpose",
                    models.CharField(
                        choices=[("booking_fee", "Booking Fee")],
                        default="booking_fee",
                        help_text="What the payment is for",
                        max_length=32,
                    ),
                ),
                (
                    "commission_percentage",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Commission percentage snapshotted at creation",
                        max_digits=5,
                    ),
                ),
                (
                    "application_fee_amount",
                    models.PositiveIntegerField(
                        help_text="Platform fee in whole currency units"
                    ),
                ),
                (
                    "transfer_destination",
                    models.CharField(
                        help_text="Destination connected account (acct_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "transfer_amount",
                    models.PositiveIntegerField(
                        help_text="Amount routed to the provider in whole currency units"
                    ),
                ),
                (
                    "latest_charge_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Latest Charge ID (ch_xxx); transfers reference it as source",
                        max_length=255,
                    ),
                ),
                (
                    "client_secret",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Client secret for frontend confirmation",
                        max_length=255,
                    ),
                ),
                (
                    "failure_message",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Last payment error reported by Stripe",
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Metadata attached to the Stripe intent",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        help_text="Booking this payment is for",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to="bookings.bookingrequest",
                    ),
                ),
                (
                    "listing",
                    models.ForeignKey(
                        help_text="Listing being paid for",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to="listings.listing",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider receiving the transfer",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_payment_intents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seeker",
                    models.ForeignKey(
                        help_text="Seeker being charged",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Intent",
                "verbose_name_plural": "Payment Intents",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["provider", "status"], name="pay_pi_provider_status_idx"
                    ),
                    models.Index(
                        fields=["seeker", "status"], name="pay_pi_seeker_status_idx"
                    ),
                    models.Index(
                        fields=["status", "updated_at"], name="pay_pi_status_updated_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transfer",
            fields=_base_fields()
            + [
                (
                    "stripe_transfer_id",
                    models.CharField(
                        help_text="Stripe Transfer ID (tr_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Amount in currency units",
                        max_digits=12,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="inr",
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_transit", "In Transit"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("canceled", "Canceled"),
                            ("reversed", "Reversed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Transfer status",
                        max_length=20,
                    ),
                ),
                (
                    "destination",
                    models.CharField(
                        help_text="Destination connected account (acct_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "source_transaction",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Source charge or payment intent",
                        max_length=255,
                    ),
                ),
                (
                    "description",
                    models.CharField(
                        blank=True,
                        default="Transfer to provider",
                        help_text="Transfer description",
                        max_length=255,
                    ),
                ),
                (
                    "payment_intent",
                    models.ForeignKey(
                        blank=True,
                        help_text="Payment intent the transfer belongs to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transfers",
                        to="payments.paymentintent",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        blank=True,
                        help_text="Provider receiving the transfer",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Transfer",
                "verbose_name_plural": "Transfers",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["provider", "status"], name="pay_tr_provider_status_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
            fields=_base_fields()
            + [
                (
                    "stripe_payout_id",
                    models.CharField(
                        help_text="Stripe Payout ID (po_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "stripe_account_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Connected account the payout was made from (acct_xxx)",
                        max_length=255,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Amount in currency units",
                        max_digits=12,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="inr",
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "method",
                    models.CharField(
                        choices=[("standard", "Standard"), ("instant", "Instant")],
                        default="standard",
                        help_text="Payout speed",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_transit", "In Transit"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("canceled", "Canceled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Stripe's payout status",
                        max_length=20,
                    ),
                ),
                (
                    "origin",
                    models.CharField(
                        choices=[("requested", "Requested"), ("processor", "Processor")],
                        default="requested",
                        help_text="Whether the row came from a request or a Stripe event",
                        max_length=20,
                    ),
                ),
                (
                    "description",
                    models.CharField(
                        blank=True,
                        default="Payout to bank account",
                        help_text="Payout description",
                        max_length=255,
                    ),
                ),
                (
                    "arrival_date",
                    models.DateField(
                        blank=True, help_text="Estimated arrival date", null=True
                    ),
                ),
                (
                    "failure_code",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Stripe failure code",
                        max_length=100,
                    ),
                ),
                (
                    "failure_message",
                    models.TextField(
                        blank=True, default="", help_text="Stripe failure message"
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Metadata attached to the payout",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        blank=True,
                        help_text="Provider receiving the payout",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Payout",
                "verbose_name_plural": "Payouts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["provider", "status"], name="pay_po_provider_status_idx"
                    ),
                    models.Index(
                        fields=["provider", "created_at"],
                        name="pay_po_provider_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookEvent",
            fields=_base_fields()
            + [
                (
                    "stripe_event_id",
                    models.CharField(
                        help_text="Stripe Event ID (evt_xxx) - unique constraint for idempotency",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        db_index=True,
                        help_text="Stripe event type (e.g., 'payment_intent.succeeded')",
                        max_length=100,
                    ),
                ),
                (
                    "payload",
                    models.JSONField(help_text="Full webhook payload from Stripe (JSON)"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current processing status",
                        max_length=20,
                    ),
                ),
                (
                    "processed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When event was successfully processed",
                        null=True,
                    ),
                ),
                (
                    "error_message",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Error message if processing failed",
                    ),
                ),
                (
                    "retry_count",
                    models.PositiveSmallIntegerField(
                        default=0, help_text="Number of processing attempts"
                    ),
                ),
            ],
            options={
                "verbose_name": "Webhook Event",
                "verbose_name_plural": "Webhook Events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "retry_count"], name="pay_we_status_retry_idx"
                    ),
                    models.Index(
                        fields=["event_type", "created_at"], name="pay_we_type_created_idx"
                    ),
                ],
            },
        ),
    ]
