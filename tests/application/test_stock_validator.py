"""Tests for the advisory Stock Validator."""

import pytest

from rxdraft.application.events import EventRecorder, Notifier, StockWarning
from rxdraft.application.stock_validator import StockValidator
from rxdraft.domain.model.line_item import LineItem
from tests.fakes import FakeCatalogService, make_medicine


def _setup():
    catalog = FakeCatalogService([make_medicine(id=5, name="Paracetamol", stock=5)])
    notifier = Notifier()
    recorder = EventRecorder(notifier, StockWarning)
    return StockValidator(catalog, notifier), catalog, recorder


@pytest.mark.asyncio
class TestCheckAvailability:

    async def test_available_quantity_is_silent(self):
        validator, _, recorder = _setup()
        assert await validator.check_availability(5, 5, "Paracetamol") is True
        assert recorder.events == []

    async def test_insufficient_stock_warns(self):
        validator, _, recorder = _setup()
        assert await validator.check_availability(5, 100, "Paracetamol") is False
        [warning] = recorder.events
        assert warning == StockWarning(medicine_id=5, medicine_name="Paracetamol", quantity=100)
        assert warning.message == "Paracetamol has insufficient stock for quantity 100"

    async def test_unnamed_medicine_gets_generic_label(self):
        validator, _, recorder = _setup()
        await validator.check_availability(5, 100)
        assert recorder.events[0].medicine_name == "Selected medicine"

    async def test_service_error_is_unknown_not_unavailable(self):
        validator, catalog, recorder = _setup()
        catalog.fail_availability = True
        assert await validator.check_availability(5, 1) is None
        assert recorder.events == []


@pytest.mark.asyncio
class TestValidateOrder:

    async def test_warns_for_each_unavailable_item(self):
        validator, catalog, recorder = _setup()
        short = LineItem.for_medicine(make_medicine(id=5, name="Paracetamol"), quantity=40)
        short.id = 10
        catalog.unavailable_items = [short]

        unavailable = await validator.validate_order(1)

        assert [i.id for i in unavailable] == [10]
        assert [w.quantity for w in recorder.events] == [40]

    async def test_failure_returns_empty(self):
        validator, catalog, recorder = _setup()
        catalog.fail_availability = True
        assert await validator.validate_order(1) == []
        assert recorder.events == []
