"""Domain Entities - Aggregates

Each aggregate checks only its own invariants. Cross-aggregate consistency
(table belongs to restaurant, reservation fits opening hours) is the job of
the application services.
"""
from pydantic import BaseModel, Field, validator
from uuid import UUID, uuid4
from datetime import datetime, time, timedelta
from typing import Optional

from config import get_settings
from domain.enums import BlockType, DayOfWeek, ReservationStatus, RestaurantStatus, TableStatus
from domain.exceptions import InvalidOperationError, InvariantViolationError
from domain.value_objects import Email, PhoneNumber, TimeWindow, as_naive_utc


def _require_text(value: Optional[str], field: str, label: str) -> None:
    if value is None or not value.strip():
        raise InvariantViolationError(f"{label} is required.", field)


def reservation_duration() -> timedelta:
    """Fixed length of every reservation"""
    return timedelta(hours=get_settings().reservation_duration_hours)


class Restaurant(BaseModel):
    """Restaurant Aggregate Root Entity"""

    # Identity
    restaurant_id: UUID = Field(default_factory=uuid4)
    owner_id: UUID

    # Details
    name: str
    cuisine_type: str
    description: str
    address: str
    phone_number: str

    status: RestaurantStatus = RestaurantStatus.ACTIVE
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        name: str,
        cuisine_type: str,
        description: str,
        address: str,
        phone_number: str,
        owner_id: UUID
    ) -> "Restaurant":
        """Create new restaurant with validation"""
        Restaurant._validate_details(name, description, address, phone_number)
        _require_text(cuisine_type, "cuisine_type", "Cuisine type")

        return Restaurant(
            owner_id=owner_id,
            name=name,
            cuisine_type=cuisine_type,
            description=description,
            address=address,
            phone_number=phone_number
        )

    # ==================== MODIFICATION METHODS ====================
    def update_details(self, name: str, description: str, address: str, phone_number: str) -> None:
        Restaurant._validate_details(name, description, address, phone_number)
        self.name = name
        self.description = description
        self.address = address
        self.phone_number = phone_number

    # ==================== STATE TRANSITION METHODS ====================
    def update_status(self, new_status: RestaurantStatus) -> None:
        """Suspended restaurants must be made inactive before reactivation"""
        if self.status == RestaurantStatus.SUSPENDED and new_status == RestaurantStatus.ACTIVE:
            raise InvalidOperationError(
                "Cannot transition directly from SUSPENDED to ACTIVE status."
            )
        self.status = new_status

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _validate_details(name: str, description: str, address: str, phone_number: str) -> None:
        _require_text(name, "name", "Name")
        _require_text(description, "description", "Description")
        _require_text(address, "address", "Address")
        _require_text(phone_number, "phone_number", "Phone number")

        if len(name) < 3:
            raise InvariantViolationError("Restaurant name must be at least 3 characters long.", "name")
        if len(name) > 100:
            raise InvariantViolationError("Restaurant name must not exceed 100 characters.", "name")


class Customer(BaseModel):
    """Customer Entity"""

    customer_id: UUID = Field(default_factory=uuid4)
    first_name: str
    last_name: str
    email: Email
    phone_number: PhoneNumber
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @staticmethod
    def create(first_name: str, last_name: str, email: str, phone_number: str) -> "Customer":
        """Create new customer; email and phone are validated by their value objects"""
        _require_text(first_name, "first_name", "First name")
        _require_text(last_name, "last_name", "Last name")

        return Customer(
            first_name=first_name,
            last_name=last_name,
            email=Email.parse(email),
            phone_number=PhoneNumber.parse(phone_number)
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def update_email(self, email: str) -> None:
        self.email = Email.parse(email)

    def update_phone_number(self, phone_number: str) -> None:
        self.phone_number = PhoneNumber.parse(phone_number)


class Table(BaseModel):
    """Table Entity"""

    table_id: UUID = Field(default_factory=uuid4)
    restaurant_id: UUID
    table_number: str
    capacity: int = Field(gt=0)
    status: TableStatus = TableStatus.AVAILABLE
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @staticmethod
    def create(table_number: str, capacity: int, restaurant_id: UUID) -> "Table":
        """Create new table, initially AVAILABLE"""
        _require_text(table_number, "table_number", "Table number")
        Table._validate_capacity(capacity)

        return Table(
            restaurant_id=restaurant_id,
            table_number=table_number,
            capacity=capacity
        )

    def update_status(self, new_status: TableStatus) -> None:
        """Any status may follow any other"""
        self.status = new_status

    def update_capacity(self, new_capacity: int) -> None:
        Table._validate_capacity(new_capacity)
        self.capacity = new_capacity

    def can_seat(self, party_size: int) -> bool:
        return self.capacity >= party_size

    @staticmethod
    def _validate_capacity(capacity: int) -> None:
        if capacity is None or capacity <= 0:
            raise InvariantViolationError("Table capacity must be greater than zero.", "capacity")


class OperatingHours(BaseModel):
    """Opening hours of a restaurant for one day of the week"""

    hours_id: UUID = Field(default_factory=uuid4)
    restaurant_id: UUID
    day_of_week: DayOfWeek
    open_time: time
    close_time: time
    is_open: bool = True
    is_overnight: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    # ==================== FACTORY METHODS ====================
    @staticmethod
    def create(
        restaurant_id: UUID,
        day_of_week: DayOfWeek,
        open_time: time,
        close_time: time,
        is_overnight: bool = False
    ) -> "OperatingHours":
        """Create open hours; overnight hours may close before they open"""
        if not is_overnight:
            OperatingHours._validate_time_range(open_time, close_time)

        return OperatingHours(
            restaurant_id=restaurant_id,
            day_of_week=day_of_week,
            open_time=open_time,
            close_time=close_time,
            is_open=True,
            is_overnight=is_overnight
        )

    @staticmethod
    def create_closed(restaurant_id: UUID, day_of_week: DayOfWeek) -> "OperatingHours":
        """Create a closed day with midnight sentinel times"""
        return OperatingHours(
            restaurant_id=restaurant_id,
            day_of_week=day_of_week,
            open_time=time.min,
            close_time=time.min,
            is_open=False,
            is_overnight=False
        )

    # ==================== MODIFICATION METHODS ====================
    def update_hours(self, open_time: time, close_time: time, is_overnight: bool = False) -> None:
        if not is_overnight:
            OperatingHours._validate_time_range(open_time, close_time)

        self.open_time = open_time
        self.close_time = close_time
        self.is_open = True
        self.is_overnight = is_overnight

    def set_closed(self) -> None:
        self.open_time = time.min
        self.close_time = time.min
        self.is_open = False
        self.is_overnight = False

    # ==================== QUERY METHODS ====================
    def is_within_operating_hours(self, time_of_day: time) -> bool:
        """Opening time is inside, closing time is outside"""
        if not self.is_open:
            return False

        if not self.is_overnight:
            return self.open_time <= time_of_day < self.close_time

        # e.g. 22:00 to 02:00 wraps past midnight
        return time_of_day >= self.open_time or time_of_day < self.close_time

    def closing_moment(self, start: datetime) -> datetime:
        """Moment the opening that contains `start` ends"""
        start = as_naive_utc(start)
        closing = datetime.combine(start.date(), self.close_time)
        if self.is_overnight and start.time() >= self.open_time:
            closing += timedelta(days=1)
        return closing

    @staticmethod
    def _validate_time_range(open_time: time, close_time: time) -> None:
        if close_time <= open_time:
            raise InvariantViolationError("Close time must be after open time.", "close_time")


class AvailabilityBlock(BaseModel):
    """Exclusion window for a whole restaurant or a single table"""

    block_id: UUID = Field(default_factory=uuid4)
    restaurant_id: UUID
    table_id: Optional[UUID] = None
    start_datetime: datetime
    end_datetime: datetime
    reason: str
    block_type: BlockType
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @validator('start_datetime', 'end_datetime')
    def store_in_utc(cls, v):
        return as_naive_utc(v)

    @staticmethod
    def create(
        restaurant_id: UUID,
        table_id: Optional[UUID],
        start_datetime: datetime,
        end_datetime: datetime,
        reason: str
    ) -> "AvailabilityBlock":
        """Create block; the kind follows from whether a table is given"""
        start_datetime, end_datetime = as_naive_utc(start_datetime), as_naive_utc(end_datetime)
        AvailabilityBlock._validate_time_range(start_datetime, end_datetime)
        _require_text(reason, "reason", "Reason")

        return AvailabilityBlock(
            restaurant_id=restaurant_id,
            table_id=table_id,
            start_datetime=start_datetime,
            end_datetime=end_datetime,
            reason=reason,
            block_type=BlockType.TABLE_MAINTENANCE if table_id else BlockType.RESTAURANT_CLOSURE
        )

    def update_period(self, start_datetime: datetime, end_datetime: datetime) -> None:
        start_datetime, end_datetime = as_naive_utc(start_datetime), as_naive_utc(end_datetime)
        AvailabilityBlock._validate_time_range(start_datetime, end_datetime)
        self.start_datetime = start_datetime
        self.end_datetime = end_datetime

    def update_reason(self, reason: str) -> None:
        _require_text(reason, "reason", "Reason")
        self.reason = reason

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_datetime, end=self.end_datetime)

    def conflicts_with(self, start_datetime: datetime, end_datetime: datetime) -> bool:
        return self.window.overlaps(start_datetime, end_datetime)

    def is_active_at(self, moment: datetime) -> bool:
        return self.window.contains(moment)

    def applies_to_table(self, table_id: UUID) -> bool:
        """Restaurant-wide blocks apply to every table"""
        return self.table_id is None or self.table_id == table_id

    @staticmethod
    def _validate_time_range(start_datetime: datetime, end_datetime: datetime) -> None:
        if end_datetime <= start_datetime:
            raise InvariantViolationError("End time must be after start time.", "end_datetime")


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # References to other aggregates
    customer_id: UUID
    restaurant_id: UUID
    table_id: UUID

    # Booking window
    reservation_datetime: datetime
    end_datetime: datetime

    party_size: int = Field(gt=0)
    special_requests: str = ""
    status: ReservationStatus = ReservationStatus.CONFIRMED

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        from_attributes = True

    @validator('reservation_datetime', 'end_datetime')
    def store_in_utc(cls, v):
        return as_naive_utc(v)

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        customer_id: UUID,
        restaurant_id: UUID,
        table_id: UUID,
        reservation_datetime: datetime,
        party_size: int,
        special_requests: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "Reservation":
        """Create confirmed reservation with validation"""
        reservation_datetime = as_naive_utc(reservation_datetime)
        Reservation._validate_lead_time(reservation_datetime, now)
        Reservation._validate_party_size(party_size)

        return Reservation(
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            table_id=table_id,
            reservation_datetime=reservation_datetime,
            end_datetime=reservation_datetime + reservation_duration(),
            party_size=party_size,
            special_requests=special_requests or "",
            status=ReservationStatus.CONFIRMED
        )

    # ==================== MODIFICATION METHODS ====================
    def update_special_requests(self, special_requests: Optional[str]) -> None:
        self.special_requests = special_requests or ""
        self.modified_at = datetime.utcnow()

    # ==================== STATE TRANSITION METHODS ====================
    def update_status(self, new_status: ReservationStatus) -> None:
        """CANCELLED, COMPLETED and NO_SHOW are terminal"""
        if self.status.is_terminal:
            label = self.status.value.lower().replace("_", "-")
            raise InvalidOperationError(f"Cannot update status of a {label} reservation.")

        self.status = new_status
        self.modified_at = datetime.utcnow()

    def cancel(self) -> None:
        self.update_status(ReservationStatus.CANCELLED)

    def complete(self) -> None:
        self.update_status(ReservationStatus.COMPLETED)

    def mark_no_show(self) -> None:
        self.update_status(ReservationStatus.NO_SHOW)

    # ==================== QUERY METHODS ====================
    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.reservation_datetime, end=self.end_datetime)

    @property
    def is_active(self) -> bool:
        """Cancelled reservations no longer hold their table"""
        return self.status != ReservationStatus.CANCELLED

    def overlaps(self, start_datetime: datetime, end_datetime: datetime) -> bool:
        return self.window.overlaps(start_datetime, end_datetime)

    def conflicts_with(self, other: "Reservation") -> bool:
        """Same table and intersecting windows"""
        return self.table_id == other.table_id and self.overlaps(
            other.reservation_datetime, other.end_datetime
        )

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _validate_lead_time(reservation_datetime: datetime, now: Optional[datetime]) -> None:
        now = as_naive_utc(now) or datetime.utcnow()

        hours = get_settings().minimum_lead_time_hours
        if reservation_datetime <= now + timedelta(hours=hours):
            unit = "hour" if hours == 1 else "hours"
            raise InvariantViolationError(
                f"Reservation must be more than {hours} {unit} in the future.", "reservation_datetime"
            )

    @staticmethod
    def _validate_party_size(party_size: int) -> None:
        if party_size is None or party_size <= 0:
            raise InvariantViolationError("Party size must be greater than zero.", "party_size")
