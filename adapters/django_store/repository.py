"""
NexaProc Record Store — Django Repository
===========================================
DjangoRecordStore implements the record store protocol over the ORM.

Records cross the boundary as plain dicts with a string "id".
critical_section(key) opens a transaction and row-locks the key's
RecordLock row (SELECT ... FOR UPDATE), so every caller sharing the key
is serialized until commit. An exception inside the section rolls the
whole transaction back; a rejected commit leaves no record.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List

from django.db import transaction

from adapters.django_store.models import (
    ActivityLog,
    DeliveryOrder,
    Good,
    Invoice,
    Quotation,
    RecordLock,
    Rfq,
    SalesOrder,
)
from core.records.store import RecordNotFound, UnknownCollection

logger = logging.getLogger("nexaproc.records")

MODEL_BY_COLLECTION = {
    "quotations": Quotation,
    "sales_orders": SalesOrder,
    "delivery_orders": DeliveryOrder,
    "invoices": Invoice,
    "rfqs": Rfq,
    "goods": Good,
    "activity_logs": ActivityLog,
}


def _model_for(collection: str):
    model = MODEL_BY_COLLECTION.get(collection)
    if model is None:
        raise UnknownCollection(f"Unknown collection '{collection}'.")
    return model


def _pk(record_id):
    """Primary keys are integers; anything else cannot match a row."""
    text = str(record_id).strip()
    return int(text) if text.isdigit() else None


def _to_record(instance) -> dict:
    record = {
        field.attname: getattr(instance, field.attname)
        for field in instance._meta.concrete_fields
    }
    record["id"] = str(instance.pk)
    return record


class DjangoRecordStore:

    def list(self, collection: str, **filters) -> List[dict]:
        model = _model_for(collection)
        query = model.objects.all()
        for field_name, value in filters.items():
            if field_name == "id":
                pk = _pk(value)
                if pk is None:
                    return []
                query = query.filter(pk=pk)
            elif value is None:
                query = query.filter(**{f"{field_name}__isnull": True})
            else:
                query = query.filter(**{field_name: str(value)})
        return [_to_record(instance) for instance in query.order_by("pk")]

    def get(self, collection: str, record_id) -> dict:
        model = _model_for(collection)
        pk = _pk(record_id)
        if pk is None:
            raise RecordNotFound(collection, record_id)
        try:
            return _to_record(model.objects.get(pk=pk))
        except model.DoesNotExist:
            raise RecordNotFound(collection, record_id) from None

    def create(self, collection: str, data: dict) -> dict:
        model = _model_for(collection)
        fields = {key: value for key, value in data.items() if key != "id"}
        instance = model.objects.create(**fields)
        # re-read so dates and decimals come back in their stored types
        return _to_record(model.objects.get(pk=instance.pk))

    def update(self, collection: str, record_id, changes: dict) -> dict:
        model = _model_for(collection)
        pk = _pk(record_id)
        if pk is None:
            raise RecordNotFound(collection, record_id)

        fields = {key: value for key, value in changes.items() if key != "id"}
        with transaction.atomic():
            try:
                instance = model.objects.select_for_update().get(pk=pk)
            except model.DoesNotExist:
                raise RecordNotFound(collection, record_id) from None
            for key, value in fields.items():
                setattr(instance, key, value)
            instance.save(update_fields=list(fields) or None)
        return _to_record(model.objects.get(pk=pk))

    @contextmanager
    def critical_section(self, key: str) -> Iterator[None]:
        with transaction.atomic():
            RecordLock.objects.get_or_create(key=key)
            RecordLock.objects.select_for_update().get(key=key)
            logger.debug("Critical section acquired: %s", key)
            yield
