"""
Validation of the customer details entered at checkout.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from ..schemas.reservation import CheckoutForm, CustomerDetails
from ..utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

MIN_NIC_LENGTH = 5


def _is_email(value: str) -> bool:
    """Accept a bare address only; the ``Name <address>`` form is rejected."""
    try:
        _, address = validate_email(value)
    except PydanticCustomError:
        return False
    return address.lower() == value.lower()


Rule = Tuple[Callable[[str], bool], str]

# Rules run against the trimmed value, in order; the first failure is reported.
FIELD_RULES: Dict[str, List[Rule]] = {
    "name": [
        (lambda value: len(value) >= 1, "Full name is required"),
    ],
    "email": [
        (_is_email, "Enter a valid email address"),
    ],
    "nic": [
        (lambda value: len(value) >= MIN_NIC_LENGTH, f"NIC must be at least {MIN_NIC_LENGTH} characters"),
    ],
}


def validate_field(field: str, value: str) -> Optional[str]:
    """
    Check one field as the customer edits it.

    Returns:
        The first failing rule's message, or None when the value is valid

    Raises:
        ValidationError: If ``field`` is not a checkout field
    """
    rules = FIELD_RULES.get(field)
    if rules is None:
        raise ValidationError(
            f"Unknown checkout field: {field}",
            field_errors={field: "Unknown field"}
        )

    trimmed = (value or "").strip()
    for check, message in rules:
        if not check(trimmed):
            return message
    return None


def validate_checkout(form: CheckoutForm) -> CustomerDetails:
    """
    Gate a full checkout form before submission.

    Args:
        form: Raw form values

    Returns:
        Trimmed customer details

    Raises:
        ValidationError: With the first message for every failing field
    """
    field_errors = {}
    for field in FIELD_RULES:
        message = validate_field(field, getattr(form, field))
        if message:
            field_errors[field] = message

    if field_errors:
        logger.info(f"Checkout validation failed for fields: {sorted(field_errors)}")
        raise ValidationError("Checkout details are invalid", field_errors=field_errors)

    return CustomerDetails(
        name=form.name.strip(),
        email=form.email.strip(),
        nic=form.nic.strip(),
    )
