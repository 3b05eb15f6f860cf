"""Unit tests for list filtering and search."""

import pytest

from fleetdesk.domain.entities import Vehicle
from fleetdesk.domain.enums import BookingStatus, StatusGroup, VehicleStatus
from fleetdesk.domain.filters import (
    filter_bookings,
    filter_vehicles,
    parse_status_filter,
    status_counts,
)
from tests.conftest import make_booking, user_payload, vehicle_payload


def _bookings():
    return [
        make_booking("b-1", "pending"),
        make_booking("b-2", "confirmed"),
        make_booking("b-3", "in_progress"),
        make_booking("b-4", "completed"),
        make_booking("b-5", "cancelled"),
    ]


class TestFilterBookings:
    def test_active_group_spans_three_statuses(self):
        ids = [b.id for b in filter_bookings(_bookings(), StatusGroup.ACTIVE)]
        assert ids == ["b-1", "b-2", "b-3"]

    def test_all_group_keeps_everything(self):
        assert len(filter_bookings(_bookings(), StatusGroup.ALL)) == 5

    def test_single_status(self):
        assert [b.id for b in filter_bookings(_bookings(), BookingStatus.CONFIRMED)] == ["b-2"]

    def test_search_by_vehicle_name_is_case_insensitive(self):
        assert len(filter_bookings(_bookings(), search="COROLLA")) == 5

    def test_search_by_customer_name(self):
        other = make_booking("b-9", customer=user_payload("c-2", "customer", profile={"firstName": "Grace", "lastName": "Hopper"}))
        found = filter_bookings(_bookings() + [other], search="hopper")
        assert [b.id for b in found] == ["b-9"]

    def test_search_by_plate(self):
        other = make_booking("b-9", vehicle=vehicle_payload("v-2", licensePlate="XYZ-999"))
        assert [b.id for b in filter_bookings(_bookings() + [other], search="xyz")] == ["b-9"]

    def test_returns_new_list(self):
        source = _bookings()
        result = filter_bookings(source)
        assert result == source
        assert result is not source


class TestFilterVehicles:
    def test_status_and_search(self):
        vehicles = [
            Vehicle.model_validate(vehicle_payload("v-1")),
            Vehicle.model_validate(vehicle_payload("v-2", make="Honda", status="maintenance")),
            Vehicle.model_validate(vehicle_payload("v-3", make="Honda")),
        ]
        assert [v.id for v in filter_vehicles(vehicles, VehicleStatus.ACTIVE, "honda")] == ["v-3"]
        assert len(filter_vehicles(vehicles)) == 3


class TestStatusCounts:
    def test_counts_per_status(self):
        counts = status_counts(_bookings() + [make_booking("b-6", "pending")])
        assert counts["pending"] == 2
        assert counts["completed"] == 1
        assert counts["all"] == 6


class TestParseStatusFilter:
    def test_group_first(self):
        assert parse_status_filter("completed") is StatusGroup.COMPLETED

    def test_exact_status(self):
        assert parse_status_filter("in_progress") is BookingStatus.IN_PROGRESS

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            parse_status_filter("teleporting")
