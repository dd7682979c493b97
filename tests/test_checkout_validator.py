"""Tests for checkout field validation."""

import pytest

from cinema_booking_platform.schemas.reservation import CheckoutForm
from cinema_booking_platform.services.checkout_validator import validate_checkout, validate_field
from cinema_booking_platform.utils.exceptions import ValidationError


def test_empty_name_is_the_only_error():
    with pytest.raises(ValidationError) as exc_info:
        validate_checkout(CheckoutForm(name="", email="a@b.com", nic="12345"))

    assert exc_info.value.field_errors == {"name": "Full name is required"}


def test_every_failing_field_reported_once():
    with pytest.raises(ValidationError) as exc_info:
        validate_checkout(CheckoutForm(name="  ", email="not-an-email", nic="1234"))

    assert exc_info.value.field_errors == {
        "name": "Full name is required",
        "email": "Enter a valid email address",
        "nic": "NIC must be at least 5 characters",
    }
    assert exc_info.value.to_dict()["details"]["field_errors"]["nic"] == "NIC must be at least 5 characters"


def test_valid_form_is_trimmed():
    customer = validate_checkout(CheckoutForm(name="  Nimal Perera ", email=" nimal@mail.lk ", nic=" 987654321V "))

    assert customer.name == "Nimal Perera"
    assert customer.email == "nimal@mail.lk"
    assert customer.nic == "987654321V"


def test_nic_length_counts_trimmed_value():
    assert validate_field("nic", "  1234  ") == "NIC must be at least 5 characters"
    assert validate_field("nic", "12345") is None


@pytest.mark.parametrize("value", ["a@b.com", "first.last@sub.mail.lk"])
def test_valid_emails(value):
    assert validate_field("email", value) is None


@pytest.mark.parametrize("value", [
    "",
    "plainaddress",
    "a@",
    "@b.com",
    "a b@c.com",
    "John Doe <john@mail.lk>",
    "<john@mail.lk>",
])
def test_invalid_emails(value):
    assert validate_field("email", value) == "Enter a valid email address"


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        validate_field("phone", "0771234567")


def test_display_name_address_blocks_checkout():
    with pytest.raises(ValidationError) as exc_info:
        validate_checkout(CheckoutForm(name="John Doe", email="John Doe <john@mail.lk>", nic="12345"))

    assert exc_info.value.field_errors == {"email": "Enter a valid email address"}
