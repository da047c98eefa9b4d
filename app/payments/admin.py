"""
Payment admin configuration.

Mirror rows are written by Stripe events, refresh reads and the payment
services, never by hand, so every admin here is read-only apart from the
webhook retry action.
"""

from django.contrib import admin

from payments.models import ConnectedAccount, PaymentIntent, Payout, Transfer, WebhookEvent
from payments.state_machines import WebhookEventStatus

__all__ = [
    "ConnectedAccountAdmin",
    "PaymentIntentAdmin",
    "PayoutAdmin",
    "TransferAdmin",
    "WebhookEventAdmin",
]


class ReadOnlyMirrorAdmin(admin.ModelAdmin):
    """Mirror rows belong to Stripe; the admin only shows them."""

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False


@admin.register(ConnectedAccount)
class ConnectedAccountAdmin(ReadOnlyMirrorAdmin):
    """
    Admin configuration for ConnectedAccount.

    Provides visibility into Stripe Connect account status.
    """

    list_display = [
        "id",
        "provider",
        "stripe_account_id",
        "status",
        "charges_enabled",
        "payouts_enabled",
        "created_at",
    ]
    list_filter = ["status", "payouts_enabled", "charges_enabled"]
    search_fields = ["id", "stripe_account_id", "provider__email"]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "provider", "stripe_account_id", "country")}),
        (
            "Status",
            {
                "fields": (
                    "status",
                    "charges_enabled",
                    "payouts_enabled",
                    "details_submitted",
                    "disabled_reason",
                ),
            },
        ),
        ("Requirements", {"fields": ("requirements",), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(PaymentIntent)
class PaymentIntentAdmin(ReadOnlyMirrorAdmin):
    list_display = [
        "stripe_payment_intent_id",
        "booking",
        "provider",
        "amount",
        "application_fee_amount",
        "status",
        "created_at",
    ]
    list_filter = ["status", "purpose", "created_at"]
    search_fields = [
        "stripe_payment_intent_id",
        "latest_charge_id",
        "booking__id",
        "seeker__email",
        "provider__email",
    ]
    raw_id_fields = ["booking", "seeker", "provider", "listing"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    exclude = ["client_secret"]


@admin.register(Transfer)
class TransferAdmin(ReadOnlyMirrorAdmin):
    list_display = ["stripe_transfer_id", "provider", "amount", "currency", "status", "created_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["stripe_transfer_id", "destination", "source_transaction", "provider__email"]
    raw_id_fields = ["payment_intent", "provider"]
    ordering = ["-created_at"]


@admin.register(Payout)
class PayoutAdmin(ReadOnlyMirrorAdmin):
    """
    Admin configuration for Payout.

    origin shows whether the provider requested the payout or Stripe
    created it on its own schedule.
    """

    list_display = [
        "stripe_payout_id",
        "provider",
        "amount",
        "method",
        "status",
        "origin",
        "arrival_date",
        "created_at",
    ]
    list_filter = ["status", "method", "origin", "created_at"]
    search_fields = ["stripe_payout_id", "stripe_account_id", "provider__email"]
    raw_id_fields = ["provider"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Provides visibility into webhook processing status.
    Webhook events are immutable once received.
    """

    list_display = [
        "id",
        "stripe_event_id",
        "event_type",
        "status",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "event_type", "created_at"]
    search_fields = ["id", "stripe_event_id", "event_type"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "stripe_event_id",
        "event_type",
        "payload",
        "status",
        "processed_at",
        "retry_count",
        "error_message",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    actions = ["retry_events"]

    fieldsets = (
        (None, {"fields": ("id", "stripe_event_id", "event_type", "status")}),
        ("Processing", {"fields": ("processed_at", "retry_count")}),
        ("Error Info", {"fields": ("error_message",), "classes": ("collapse",)}),
        ("Payload", {"fields": ("payload",), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for webhook events (audit trail)."""
        return False

    def has_add_permission(self, request) -> bool:
        """Disable adding webhook events through admin."""
        return False

    @admin.action(description="Retry selected failed events")
    def retry_events(self, request, queryset):
        from payments.webhooks.handlers import process_webhook_event

        retried = 0
        for webhook_event in queryset.filter(status=WebhookEventStatus.FAILED):
            try:
                process_webhook_event(webhook_event)
                retried += 1
            except Exception as exc:
                self.message_user(
                    request,
                    f"{webhook_event.stripe_event_id} failed again: {exc}",
                    level="error",
                )
        self.message_user(request, f"Reprocessed {retried} webhook event(s)")
