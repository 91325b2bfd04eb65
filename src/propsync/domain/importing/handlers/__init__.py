"""Row handlers, one per importable entity kind."""

from __future__ import annotations

from propsync.domain.importing.handlers.base import RowHandler, RowServices
from propsync.domain.importing.handlers.bookings import BookingRow, BookingRowHandler
from propsync.domain.importing.handlers.contacts import ContactRow, ContactRowHandler
from propsync.domain.importing.handlers.pricing import PriceRangeImportRow, PriceRangeRowHandler
from propsync.domain.importing.handlers.properties import (
    AvailabilityRequestRow,
    EmbeddedBookingRow,
    OperationalCostRow,
    PriceRangeRow,
    PropertyRow,
    PropertyRowHandler,
)

__all__ = [
    "AvailabilityRequestRow",
    "BookingRow",
    "BookingRowHandler",
    "ContactRow",
    "ContactRowHandler",
    "EmbeddedBookingRow",
    "OperationalCostRow",
    "PriceRangeImportRow",
    "PriceRangeRow",
    "PriceRangeRowHandler",
    "PropertyRow",
    "PropertyRowHandler",
    "RowHandler",
    "RowServices",
]
