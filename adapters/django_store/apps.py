"""
NexaProc — Record Store App Configuration
===========================================
Django persistence for quotations, sales orders, delivery orders,
invoices, RFQs, the goods catalog and the activity log.

This app:
- Implements the record store protocol over the Django ORM
- Provides per-key critical sections (transaction + row lock)

This app does NOT:
- Validate business rules (engines own their policies)
- Decode line items (services use core.records.codec)
"""

from django.apps import AppConfig


class RecordStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "adapters.django_store"
    label = "nexaproc_store"
    verbose_name = "NexaProc Record Store"
