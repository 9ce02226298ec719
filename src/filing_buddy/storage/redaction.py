"""Hashing and redaction utilities for document content."""

import hashlib
import re

SSN_DASHED_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
SSN_PLAIN_PATTERN = re.compile(r"\b\d{9}\b")
EIN_PATTERN = re.compile(r"\b\d{2}-\d{7}\b")


def hash_content(content: str | bytes) -> str:
    """
    Compute SHA-256 hash of content.

    Args:
        content: Text or bytes to hash

    Returns:
        Hex-encoded SHA-256 hash
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def redact_ssn(text: str) -> str:
    """
    Redact Social Security Numbers from text.

    Replaces patterns like XXX-XX-XXXX or XXXXXXXXX with [SSN REDACTED].
    """
    text = SSN_DASHED_PATTERN.sub("[SSN REDACTED]", text)
    return SSN_PLAIN_PATTERN.sub("[SSN REDACTED]", text)


def redact_ein(text: str) -> str:
    """
    Redact Employer Identification Numbers from text.

    Replaces patterns like XX-XXXXXXX with [EIN REDACTED].
    """
    return EIN_PATTERN.sub("[EIN REDACTED]", text)


def redact_sensitive_data(text: str, redact_ssn_flag: bool = True, redact_ein_flag: bool = True) -> str:
    """
    Redact sensitive data from text before sending it to an extraction service.

    Args:
        text: Text to redact
        redact_ssn_flag: Whether to redact SSNs
        redact_ein_flag: Whether to redact EINs

    Returns:
        Redacted text
    """
    if redact_ssn_flag:
        text = redact_ssn(text)
    if redact_ein_flag:
        text = redact_ein(text)
    return text
