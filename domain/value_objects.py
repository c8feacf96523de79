"""Domain Value Objects"""
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel, validator

from config import get_settings
from domain.exceptions import InvariantViolationError


def as_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Stored times are naive UTC; aware values are converted, naive ones taken as UTC"""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class ValidationResult(BaseModel):
    """Value Object carrying a verdict and every reason it failed"""
    is_valid: bool
    errors: List[str] = []

    class Config:
        frozen = True

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def failure(cls, *errors: str) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors))

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        """Successful when no errors were collected"""
        if not errors:
            return cls.success()
        return cls(is_valid=False, errors=list(errors))


class TimeWindow(BaseModel):
    """Value Object for a half-open [start, end) interval"""
    start: datetime
    end: datetime

    @validator('start')
    def start_in_utc(cls, v):
        return as_naive_utc(v)

    @validator('end')
    def end_after_start(cls, v, values):
        v = as_naive_utc(v)
        if 'start' in values and v <= values['start']:
            raise ValueError('End time must be after start time')
        return v

    class Config:
        frozen = True

    @classmethod
    def starting_at(cls, start: datetime, duration: timedelta) -> "TimeWindow":
        return cls(start=start, end=start + duration)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Touching endpoints do not overlap"""
        return self.start < as_naive_utc(end) and self.end > as_naive_utc(start)

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_naive_utc(moment) < self.end

    def duration(self) -> timedelta:
        return self.end - self.start


# ==================== CONTACT VALIDATION ====================

class ContactValidation(BaseModel):
    """Outcome of validating an email address or phone number"""
    is_valid: bool
    normalized: Optional[str] = None
    error: Optional[str] = None

    class Config:
        frozen = True


def validate_email(value: Optional[str], pattern: Optional[str] = None) -> ContactValidation:
    """Check an email address against the configured pattern, normalized to lower case"""
    if value is None or not value.strip():
        return ContactValidation(is_valid=False, error="Email address is required.")

    pattern = pattern or get_settings().email_pattern
    if not re.match(pattern, value, re.IGNORECASE):
        return ContactValidation(is_valid=False, error="Email format is invalid.")

    return ContactValidation(is_valid=True, normalized=value.lower())


def validate_phone_number(value: Optional[str], pattern: Optional[str] = None) -> ContactValidation:
    """Check a phone number against the configured pattern"""
    if value is None or not value.strip():
        return ContactValidation(is_valid=False, error="Phone number is required.")

    pattern = pattern or get_settings().phone_pattern
    if not re.match(pattern, value):
        return ContactValidation(is_valid=False, error="Phone number format is invalid.")

    return ContactValidation(is_valid=True, normalized=value)


class Email(BaseModel):
    """Value Object for a validated, lower-cased email address"""
    value: str

    class Config:
        frozen = True

    @classmethod
    def parse(cls, raw: Optional[str], pattern: Optional[str] = None) -> "Email":
        result = validate_email(raw, pattern)
        if not result.is_valid:
            raise InvariantViolationError(result.error, "email")
        return cls(value=result.normalized)

    def __str__(self) -> str:
        return self.value


class PhoneNumber(BaseModel):
    """Value Object for a validated phone number"""
    value: str

    class Config:
        frozen = True

    @classmethod
    def parse(cls, raw: Optional[str], pattern: Optional[str] = None) -> "PhoneNumber":
        result = validate_phone_number(raw, pattern)
        if not result.is_valid:
            raise InvariantViolationError(result.error, "phone_number")
        return cls(value=result.normalized)

    def __str__(self) -> str:
        return self.value
