from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PlatformSetting",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
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
                    "key",
                    models.CharField(
                        help_text="Dotted setting name, e.g. 'booking.commission_percent'",
                        max_length=128,
                        unique=True,
                    ),
                ),
                ("value", models.JSONField(help_text="Setting value (JSON)")),
                (
                    "description",
                    models.TextField(
                        blank=True, default="", help_text="What this setting controls"
                    ),
                ),
            ],
            options={
                "verbose_name": "Platform Setting",
                "verbose_name_plural": "Platform Settings",
                "ordering": ["key"],
            },
        ),
    ]
