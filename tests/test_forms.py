"""Unit tests for client-side form validation."""

from datetime import datetime, timedelta

import pytest

from fleetdesk.domain.errors import ValidationError
from fleetdesk.domain.forms import (
    BookingForm,
    LoginForm,
    RegisterForm,
    VehicleForm,
    validate_form,
)


def _registration(**overrides):
    data = {
        "email": "ada@example.com",
        "password": "Secret1!x",
        "confirm_password": "Secret1!x",
        "role": "customer",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": "+1 (555) 010-0100",
        "street": "1 Analytical Way",
        "city": "London",
        "state": "LDN",
        "zip_code": "N1",
        "country": "UK",
    }
    data.update(overrides)
    return data


def _vehicle(**overrides):
    data = {
        "make": "Toyota",
        "model": "Corolla",
        "year": 2022,
        "color": "Blue",
        "license_plate": "ABC-123",
        "vin": "1HGCM82633A004352",
        "type": "sedan",
        "base_rate": 80,
        "rate_type": "daily",
    }
    data.update(overrides)
    return data


def _booking(**overrides):
    start = datetime.now() + timedelta(days=2)
    data = {
        "vehicle_id": "v-1",
        "pickup_address": "Airport",
        "dropoff_address": "Downtown",
        "start_date": start,
        "end_date": start + timedelta(days=3),
    }
    data.update(overrides)
    return data


class TestLoginForm:
    def test_valid(self):
        form = validate_form(LoginForm, {"email": "ada@example.com", "password": "whatever1"})
        assert form.to_payload() == {"email": "ada@example.com", "password": "whatever1"}

    def test_bad_email_and_short_password(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(LoginForm, {"email": "nope", "password": "short"})
        assert set(exc.value.fields) == {"email", "password"}

    def test_missing_field_is_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(LoginForm, {"password": "whatever1"})
        assert exc.value.fields == {"email": "Email is required"}


class TestRegisterForm:
    def test_payload_nests_profile(self):
        payload = validate_form(RegisterForm, _registration()).to_payload()
        assert payload["role"] == "customer"
        assert payload["profile"]["firstName"] == "Ada"
        assert payload["profile"]["address"]["zipCode"] == "N1"

    def test_owner_role_wire_value(self):
        form = validate_form(RegisterForm, _registration(role="vehicle_owner"))
        assert form.to_payload()["role"] == "vehicle_owner"

    def test_weak_password(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(RegisterForm, _registration(password="alllowercase1", confirm_password="alllowercase1"))
        assert "uppercase" in exc.value.fields["password"]

    def test_passwords_must_match(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(RegisterForm, _registration(confirm_password="Different1!"))
        assert exc.value.fields == {"confirm_password": "Passwords must match"}

    def test_phone_shape(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(RegisterForm, _registration(phone="call me"))
        assert exc.value.fields["phone"] == "Invalid phone number"

    def test_blank_city_is_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(RegisterForm, _registration(city=""))
        assert exc.value.fields == {"city": "City is required"}


class TestVehicleForm:
    def test_payload_shape(self):
        payload = validate_form(VehicleForm, _vehicle()).to_payload()
        assert payload["modelName"] == "Corolla"
        assert payload["pricing"] == {"baseRate": 80, "rateType": "daily", "currency": "USD"}
        assert payload["status"] == "active"

    def test_implausible_year(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(VehicleForm, _vehicle(year=1850))
        assert exc.value.fields == {"year": "Invalid year"}

    def test_vin_length(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(VehicleForm, _vehicle(vin="SHORT"))
        assert "vin" in exc.value.fields


class TestBookingForm:
    def test_mixed_timezones_compare_on_one_clock(self):
        form = validate_form(
            BookingForm,
            _booking(start_date="2030-01-01T10:00:00Z", end_date="2030-01-03T10:00:00"),
        )
        assert form.end_date.tzinfo is not None
        assert form.end_date > form.start_date

    def test_mixed_timezones_end_before_start(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(
                BookingForm,
                _booking(start_date="2030-01-03T10:00:00Z", end_date="2030-01-01T10:00:00"),
            )
        assert exc.value.fields == {"end_date": "End date must be after start date"}

    def test_payload_shape(self):
        payload = validate_form(BookingForm, _booking(customer_notes="Child seat")).to_payload()
        assert payload["vehicleId"] == "v-1"
        assert payload["pickupLocation"] == {"address": "Airport"}
        assert payload["paymentMethod"] == "credit_card"
        assert payload["customerNotes"] == "Child seat"

    def test_start_in_past(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(BookingForm, _booking(start_date=datetime.now() - timedelta(days=1)))
        assert exc.value.fields["start_date"] == "Start date must be in the future"

    def test_end_before_start(self):
        data = _booking()
        data["end_date"] = data["start_date"] - timedelta(hours=1)
        with pytest.raises(ValidationError) as exc:
            validate_form(BookingForm, data)
        assert exc.value.fields == {"end_date": "End date must be after start date"}
