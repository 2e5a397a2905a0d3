import re
from decimal import Decimal, InvalidOperation
from pathlib import PurePath

from pagadiario.core.config import ALLOWED_EVIDENCE_TYPES, MAX_EVIDENCE_BYTES
from pagadiario.core.exceptions import SanitizationError

VALIDATION_PATTERNS = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^[\d\s\-+()]+$"),
    "name": re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑ\s]+$"),
    "address": re.compile(r"^[a-zA-Z0-9áéíóúÁÉÍÓÚñÑ\s\-#,.]+$"),
    "amount": re.compile(r"^\d+(\.\d{1,2})?$"),
    "alphanumeric": re.compile(r"^[a-zA-Z0-9]+$"),
    "uuid": re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
        re.IGNORECASE,
    ),
}

_DANGEROUS_CHARS = re.compile(r"[<>\"'&]")
_SUSPICIOUS_SUFFIXES = (".php", ".js", ".exe", ".bat", ".sh")


def sanitize_string(value, max_length: int = 255) -> str:
    if not isinstance(value, str):
        raise SanitizationError("Input must be a string")
    return _DANGEROUS_CHARS.sub("", value.strip()[:max_length])


def sanitize_email(email: str) -> str:
    if not isinstance(email, str):
        raise SanitizationError("Input must be a string")
    sanitized = sanitize_string(email.lower(), 254)
    if not VALIDATION_PATTERNS["email"].match(sanitized):
        raise SanitizationError("Invalid email format")
    return sanitized


def sanitize_name(name: str) -> str:
    sanitized = sanitize_string(name, 100)
    if not VALIDATION_PATTERNS["name"].match(sanitized):
        raise SanitizationError("Name contains invalid characters")
    return sanitized


def sanitize_address(address: str) -> str:
    sanitized = sanitize_string(address, 500)
    if not VALIDATION_PATTERNS["address"].match(sanitized):
        raise SanitizationError("Address contains invalid characters")
    return sanitized


def sanitize_phone(phone: str) -> str:
    sanitized = sanitize_string(phone, 20)
    if not VALIDATION_PATTERNS["phone"].match(sanitized):
        raise SanitizationError("Phone number contains invalid characters")
    return sanitized


def sanitize_amount(amount) -> Decimal:
    """Accept '12', '12.5', '12.50' (or the equivalent numbers); reject anything else."""
    if amount is None or isinstance(amount, bool):
        raise SanitizationError("Invalid amount format")
    if isinstance(amount, (int, float, Decimal)):
        amount = str(amount)

    sanitized = sanitize_string(amount, 20)
    if not VALIDATION_PATTERNS["amount"].match(sanitized):
        raise SanitizationError("Invalid amount format")

    try:
        value = Decimal(sanitized)
    except InvalidOperation:
        raise SanitizationError("Invalid amount format")

    if value < 0:
        raise SanitizationError("Amount must be a positive number")
    return value


def validate_uuid(value) -> bool:
    return isinstance(value, str) and bool(VALIDATION_PATTERNS["uuid"].match(value))


def validate_file_upload(filename: str, content_type: str, size: int) -> None:
    if content_type not in ALLOWED_EVIDENCE_TYPES:
        raise SanitizationError("Invalid file type. Only JPEG, PNG, and WebP images are allowed.")

    if size > MAX_EVIDENCE_BYTES:
        raise SanitizationError("File size too large. Maximum size is 5MB.")

    if PurePath(filename or "").name.lower().endswith(_SUSPICIOUS_SUFFIXES):
        raise SanitizationError("Suspicious file name detected.")
