from dataclasses import dataclass, field
from typing import Dict

from pagadiario.core.exceptions import SanitizationError
from pagadiario.utils.sanitizers import (
    sanitize_address,
    sanitize_amount,
    sanitize_email,
    sanitize_name,
    sanitize_phone,
    sanitize_string,
    validate_uuid,
)

DEBT_FREQUENCIES = ("daily", "weekly")
PAYMENT_STATUSES = ("paid", "not_paid", "client_absent")


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_amount(errors: Dict[str, str], data, key: str, label: str) -> None:
    try:
        if sanitize_amount(data.get(key)) <= 0:
            errors[key] = f"{label} must be greater than 0"
    except SanitizationError as e:
        errors[key] = str(e)


def validate_client_form(data) -> ValidationResult:
    result = ValidationResult()

    try:
        if _blank(data.get("name")):
            result.errors["name"] = "Name is required"
        else:
            sanitize_name(data["name"])
    except SanitizationError as e:
        result.errors["name"] = str(e)

    try:
        if _blank(data.get("address")):
            result.errors["address"] = "Address is required"
        else:
            sanitize_address(data["address"])
    except SanitizationError as e:
        result.errors["address"] = str(e)

    if not _blank(data.get("phone")):
        try:
            sanitize_phone(data["phone"])
        except SanitizationError as e:
            result.errors["phone"] = str(e)

    return result


def validate_debt_form(data) -> ValidationResult:
    result = ValidationResult()

    if not validate_uuid(data.get("client_id")):
        result.errors["client_id"] = "Valid client ID is required"

    _check_amount(result.errors, data, "total_amount", "Total amount")
    _check_amount(result.errors, data, "installment_amount", "Installment amount")

    if data.get("frequency") not in DEBT_FREQUENCIES:
        result.errors["frequency"] = "Frequency must be daily or weekly"

    if _blank(data.get("start_date")):
        result.errors["start_date"] = "Start date is required"

    return result


def validate_payment_form(data) -> ValidationResult:
    result = ValidationResult()

    if not validate_uuid(data.get("route_assignment_id")):
        result.errors["route_assignment_id"] = "Valid route assignment ID is required"

    status = data.get("payment_status")
    if status not in PAYMENT_STATUSES:
        result.errors["payment_status"] = "Invalid payment status"

    if status == "paid":
        _check_amount(result.errors, data, "amount_paid", "Payment amount")

    if not _blank(data.get("notes")):
        try:
            sanitize_string(data["notes"], 1000)
        except SanitizationError:
            result.errors["notes"] = "Notes contain invalid characters"

    return result


def validate_route_form(data) -> ValidationResult:
    result = ValidationResult()

    if not validate_uuid(data.get("collector_id")):
        result.errors["collector_id"] = "Valid collector ID is required"

    if _blank(data.get("route_date")):
        result.errors["route_date"] = "Route date is required"

    client_ids = data.get("client_ids") or []
    if not client_ids:
        result.errors["client_ids"] = "At least one client is required"
    elif not all(validate_uuid(c) for c in client_ids):
        result.errors["client_ids"] = "All client IDs must be valid"
    elif len(set(client_ids)) != len(client_ids):
        result.errors["client_ids"] = "A client can only be visited once per route"

    return result


def validate_collector_form(data) -> ValidationResult:
    result = ValidationResult()

    try:
        if _blank(data.get("full_name")):
            result.errors["full_name"] = "Full name is required"
        else:
            sanitize_name(data["full_name"])
    except SanitizationError as e:
        result.errors["full_name"] = str(e)

    try:
        if _blank(data.get("email")):
            result.errors["email"] = "Email is required"
        else:
            sanitize_email(data["email"])
    except SanitizationError as e:
        result.errors["email"] = str(e)

    return result
