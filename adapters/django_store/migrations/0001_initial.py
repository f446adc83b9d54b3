import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models


def _money():
    return models.DecimalField(decimal_places=2, default=0, max_digits=14)


def _id():
    return models.BigAutoField(
        auto_created=True,
        primary_key=True,
        serialize=False,
        verbose_name="ID",
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Rfq",
            fields=[
                ("id", _id()),
                ("rfq_number", models.CharField(max_length=120)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("project_name", models.CharField(blank=True, default="", max_length=255)),
                ("pic_name", models.CharField(blank=True, default="", max_length=255)),
                ("pic_email", models.CharField(blank=True, default="", max_length=255)),
                ("pic_phone", models.CharField(blank=True, default="", max_length=100)),
                ("goods", models.TextField(blank=True, default="")),
                ("status", models.CharField(default="draft", max_length=50)),
                ("performed_by", models.CharField(blank=True, max_length=120, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_rfqs",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Good",
            fields=[
                ("id", _id()),
                ("sku", models.CharField(blank=True, default="", max_length=120)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("unit", models.CharField(default="pcs", max_length=50)),
                ("price", _money()),
                ("minimum_order_quantity", models.PositiveIntegerField(default=1)),
                ("status", models.CharField(default="active", max_length=50)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_goods",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Quotation",
            fields=[
                ("id", _id()),
                ("quotation_number", models.CharField(db_index=True, max_length=120)),
                ("rfq_id", models.CharField(blank=True, max_length=120, null=True)),
                ("client_id", models.CharField(blank=True, max_length=120, null=True)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("pic_name", models.CharField(blank=True, default="", max_length=255)),
                ("pic_email", models.CharField(blank=True, default="", max_length=255)),
                ("pic_phone", models.CharField(blank=True, default="", max_length=100)),
                ("payment_time", models.CharField(blank=True, default="", max_length=100)),
                ("goods", models.TextField(blank=True, default="")),
                ("include_tax", models.BooleanField(default=False)),
                ("total_amount", _money()),
                ("tax_amount", _money()),
                ("grand_total", _money()),
                ("status", models.CharField(default="waiting", max_length=50)),
                ("negotiation_round", models.PositiveIntegerField(default=0)),
                ("performed_by", models.CharField(blank=True, max_length=120, null=True)),
                ("last_edited_by", models.CharField(blank=True, max_length=120, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_quotations",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="SalesOrder",
            fields=[
                ("id", _id()),
                ("order_number", models.CharField(max_length=120)),
                ("quotation_id", models.CharField(db_index=True, max_length=120)),
                ("client_id", models.CharField(blank=True, max_length=120, null=True)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("order_date", models.DateField(blank=True, null=True)),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("delivery_address", models.TextField(blank=True, default="")),
                ("payment_time", models.CharField(blank=True, default="", max_length=100)),
                ("goods", models.TextField(blank=True, default="")),
                ("include_tax", models.BooleanField(default=False)),
                ("total_amount", _money()),
                ("tax_amount", _money()),
                ("grand_total", _money()),
                ("status", models.CharField(default="ongoing", max_length=50)),
                ("created_by", models.CharField(blank=True, max_length=120, null=True)),
                ("last_edited_by", models.CharField(blank=True, max_length=120, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_sales_orders",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="DeliveryOrder",
            fields=[
                ("id", _id()),
                ("delivery_number", models.CharField(max_length=120)),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("sales_order_id", models.CharField(db_index=True, max_length=120)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("ship_address", models.TextField(blank=True, default="")),
                ("goods", models.TextField(blank=True, default="")),
                ("created_by", models.CharField(blank=True, max_length=120, null=True)),
                ("last_edited_by", models.CharField(blank=True, max_length=120, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_delivery_orders",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", _id()),
                ("invoice_number", models.CharField(max_length=120)),
                ("sales_order_id", models.CharField(db_index=True, max_length=120)),
                ("client_id", models.CharField(blank=True, max_length=120, null=True)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("billing_address", models.TextField(blank=True, default="")),
                ("payment_time", models.CharField(blank=True, default="", max_length=100)),
                ("invoice_date", models.DateField(blank=True, null=True)),
                ("goods", models.TextField(blank=True, default="")),
                ("total_amount", _money()),
                ("tax_amount", _money()),
                ("grand_total", _money()),
                ("status", models.CharField(default="overdue", max_length=50)),
                ("paid_date", models.DateField(blank=True, null=True)),
                ("created_by", models.CharField(blank=True, max_length=120, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_invoices",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", _id()),
                ("entry_id", models.CharField(max_length=64, unique=True)),
                ("actor_id", models.CharField(max_length=120)),
                ("entity_type", models.CharField(max_length=100)),
                ("entity_id", models.CharField(max_length=120)),
                ("action", models.CharField(max_length=50)),
                ("description", models.TextField(blank=True, default="")),
                ("event_type", models.CharField(blank=True, default="", max_length=120)),
                (
                    "metadata",
                    models.JSONField(
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                    ),
                ),
                ("occurred_at", models.DateTimeField()),
            ],
            options={
                "db_table": "nexaproc_activity_logs",
                "ordering": ["occurred_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["entity_type", "entity_id"],
                        name="idx_activity_entity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecordLock",
            fields=[
                ("id", _id()),
                ("key", models.CharField(max_length=255, unique=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "nexaproc_record_locks",
            },
        ),
    ]
