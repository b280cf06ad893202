"""Validation for PnL requests (wallet address and date range)"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None

def is_valid_address(address: str) -> ValidationResult:
    """Check for a 0x-prefixed 20-byte hex address"""
    if not address or not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
        return ValidationResult(False, "Invalid address format")
    return ValidationResult(True)

def parse_date(value: str) -> date:
    return datetime.strptime(value, '%Y-%m-%d').date()

def is_valid_date_string(value: str) -> bool:
    """Check that a string is a real calendar date in YYYY-MM-DD format"""
    if not value or not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        parse_date(value)
    except ValueError:
        return False
    return True

def validate_date_range(start: str, end: str, today: Optional[date] = None) -> ValidationResult:
    """Both dates valid, start <= end, and start not after today (UTC)"""
    if not is_valid_date_string(start):
        return ValidationResult(False, "Invalid start date format. Use YYYY-MM-DD")
    if not is_valid_date_string(end):
        return ValidationResult(False, "Invalid end date format. Use YYYY-MM-DD")

    start_date = parse_date(start)
    end_date = parse_date(end)
    today = today or datetime.now(timezone.utc).date()

    if start_date > end_date:
        return ValidationResult(False, "Start date must be before end date")
    if start_date > today:
        return ValidationResult(False, "Start date cannot be in the future")
    return ValidationResult(True)

def validate_pnl_request(address: str, start: str, end: str, today: Optional[date] = None) -> ValidationResult:
    """Validate the wallet address, then the date range"""
    address_result = is_valid_address(address)
    if not address_result.valid:
        return address_result
    return validate_date_range(start, end, today)
