"""Domain Enums"""
from datetime import date
from enum import Enum


class TableStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class ReservationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return self is not ReservationStatus.CONFIRMED


class RestaurantStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class BlockType(str, Enum):
    TABLE_MAINTENANCE = "TABLE_MAINTENANCE"
    RESTAURANT_CLOSURE = "RESTAURANT_CLOSURE"


class DayOfWeek(int, Enum):
    """Day of week, numbered like date.weekday()"""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, value: date) -> "DayOfWeek":
        """Day of week for a date or datetime"""
        return cls(value.weekday())

    @property
    def label(self) -> str:
        return self.name.capitalize()
