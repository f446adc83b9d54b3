"""
NexaProc Record Store — Models
================================
One table per record store collection. Line items stay in a text
column written by core.records.codec. Cross-record references are
plain string ids, mirroring the record store protocol.
"""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


def _money():
    return models.DecimalField(max_digits=14, decimal_places=2, default=0)


class Rfq(models.Model):
    rfq_number = models.CharField(max_length=120)
    company_name = models.CharField(max_length=255, blank=True, default="")
    project_name = models.CharField(max_length=255, blank=True, default="")
    pic_name = models.CharField(max_length=255, blank=True, default="")
    pic_email = models.CharField(max_length=255, blank=True, default="")
    pic_phone = models.CharField(max_length=100, blank=True, default="")
    goods = models.TextField(blank=True, default="")
    status = models.CharField(max_length=50, default="draft")
    performed_by = models.CharField(max_length=120, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_rfqs"
        ordering = ["id"]


class Good(models.Model):
    sku = models.CharField(max_length=120, blank=True, default="")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    unit = models.CharField(max_length=50, default="pcs")
    price = _money()
    minimum_order_quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=50, default="active")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_goods"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class Quotation(models.Model):
    quotation_number = models.CharField(max_length=120, db_index=True)
    rfq_id = models.CharField(max_length=120, null=True, blank=True)
    client_id = models.CharField(max_length=120, null=True, blank=True)
    company_name = models.CharField(max_length=255, blank=True, default="")
    pic_name = models.CharField(max_length=255, blank=True, default="")
    pic_email = models.CharField(max_length=255, blank=True, default="")
    pic_phone = models.CharField(max_length=100, blank=True, default="")
    payment_time = models.CharField(max_length=100, blank=True, default="")
    goods = models.TextField(blank=True, default="")
    include_tax = models.BooleanField(default=False)
    total_amount = _money()
    tax_amount = _money()
    grand_total = _money()
    status = models.CharField(max_length=50, default="waiting")
    negotiation_round = models.PositiveIntegerField(default=0)
    performed_by = models.CharField(max_length=120, null=True, blank=True)
    last_edited_by = models.CharField(max_length=120, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_quotations"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.quotation_number} ({self.status})"


class SalesOrder(models.Model):
    order_number = models.CharField(max_length=120)
    quotation_id = models.CharField(max_length=120, db_index=True)
    client_id = models.CharField(max_length=120, null=True, blank=True)
    company_name = models.CharField(max_length=255, blank=True, default="")
    order_date = models.DateField(null=True, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    delivery_address = models.TextField(blank=True, default="")
    payment_time = models.CharField(max_length=100, blank=True, default="")
    goods = models.TextField(blank=True, default="")
    include_tax = models.BooleanField(default=False)
    total_amount = _money()
    tax_amount = _money()
    grand_total = _money()
    status = models.CharField(max_length=50, default="ongoing")
    created_by = models.CharField(max_length=120, null=True, blank=True)
    last_edited_by = models.CharField(max_length=120, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_sales_orders"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class DeliveryOrder(models.Model):
    delivery_number = models.CharField(max_length=120)
    delivery_date = models.DateField(null=True, blank=True)
    sales_order_id = models.CharField(max_length=120, db_index=True)
    company_name = models.CharField(max_length=255, blank=True, default="")
    ship_address = models.TextField(blank=True, default="")
    goods = models.TextField(blank=True, default="")
    created_by = models.CharField(max_length=120, null=True, blank=True)
    last_edited_by = models.CharField(max_length=120, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_delivery_orders"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.delivery_number


class Invoice(models.Model):
    invoice_number = models.CharField(max_length=120)
    sales_order_id = models.CharField(max_length=120, db_index=True)
    client_id = models.CharField(max_length=120, null=True, blank=True)
    company_name = models.CharField(max_length=255, blank=True, default="")
    billing_address = models.TextField(blank=True, default="")
    payment_time = models.CharField(max_length=100, blank=True, default="")
    invoice_date = models.DateField(null=True, blank=True)
    goods = models.TextField(blank=True, default="")
    total_amount = _money()
    tax_amount = _money()
    grand_total = _money()
    status = models.CharField(max_length=50, default="overdue")
    paid_date = models.DateField(null=True, blank=True)
    created_by = models.CharField(max_length=120, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_invoices"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"


class ActivityLog(models.Model):
    entry_id = models.CharField(max_length=64, unique=True)
    actor_id = models.CharField(max_length=120)
    entity_type = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=120)
    action = models.CharField(max_length=50)
    description = models.TextField(blank=True, default="")
    event_type = models.CharField(max_length=120, blank=True, default="")
    metadata = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    occurred_at = models.DateTimeField()

    class Meta:
        db_table = "nexaproc_activity_logs"
        ordering = ["occurred_at", "id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="idx_activity_entity"),
        ]


class RecordLock(models.Model):
    """One row per critical-section key; locked with SELECT ... FOR UPDATE."""
    key = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nexaproc_record_locks"
