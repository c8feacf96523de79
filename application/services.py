"""Application Services - availability and assignment engine plus booking use cases

The engine services never raise for business-rule failures: every failing
rule is collected into a ValidationResult so callers can report all of them
at once. Only entity invariant violations propagate as exceptions.

Checking availability and then saving a reservation is not atomic here.
Two concurrent bookings can both pass validation; preventing the double
booking is left to the storage layer's transaction isolation.
"""
import logging
from uuid import UUID
from datetime import datetime, time
from typing import List, Optional

from pydantic import BaseModel

from domain.entities import (
    AvailabilityBlock, Customer, OperatingHours, Reservation, Restaurant, Table, reservation_duration
)
from domain.enums import DayOfWeek, ReservationStatus, RestaurantStatus, TableStatus
from domain.exceptions import DuplicateEntityError, InvalidOperationError, InvariantViolationError
from domain.repositories import (
    AvailabilityBlockRepository, OperatingHoursRepository, ReservationRepository,
    RestaurantRepository, TableRepository, UnitOfWork
)
from domain.specifications import reservation_by_restaurant, table_by_minimum_capacity
from domain.value_objects import ValidationResult, as_naive_utc

logger = logging.getLogger(__name__)

# Rejection reasons
RESTAURANT_NOT_FOUND = "Restaurant not found"
TABLE_NOT_FOUND = "Table not found"
CUSTOMER_NOT_FOUND = "Customer not found"
CAPACITY_INSUFFICIENT = "Table capacity is insufficient for party size"
TABLE_NOT_IN_RESTAURANT = "Table does not belong to the specified restaurant"
CLOSED_ON_DAY = "Restaurant is closed on the requested day"
CLOSED_AT_TIME = "Restaurant is closed during the requested time"
START_OUTSIDE_HOURS = "Reservation start time is outside operating hours"
EXTENDS_BEYOND_CLOSING = "Reservation would extend beyond closing time"
TABLE_UNAVAILABLE = "Table is not available during the requested time"
AVAILABILITY_RESTRICTED = "Restaurant has availability restrictions during the requested time"
NO_TABLE_AVAILABLE = "No table available for the requested party size and time"


class OperatingHoursService:
    """Evaluates points in time and reservation windows against opening hours"""

    def __init__(self, repository: OperatingHoursRepository):
        self.repository = repository

    # ==================== PURE EVALUATORS ====================
    @staticmethod
    def is_within_operating_hours(hours: Optional[OperatingHours], time_of_day: time) -> bool:
        """Missing or closed hours never contain a time"""
        if hours is None or not hours.is_open:
            return False
        return hours.is_within_operating_hours(time_of_day)

    @staticmethod
    def validate_reservation_window(
        hours: Optional[OperatingHours],
        reservation_start: datetime
    ) -> ValidationResult:
        """Check that a whole reservation fits in the opening it starts in.

        For overnight hours the opening started at or after ``open_time``
        closes on the following day, so a reservation nested inside the
        wrap-around window is accepted.
        """
        reservation_start = as_naive_utc(reservation_start)
        if hours is None or not hours.is_open:
            day = DayOfWeek.of(reservation_start).label
            return ValidationResult.failure(f"Restaurant is closed on {day}")

        errors = []
        reservation_end = reservation_start + reservation_duration()

        if not hours.is_within_operating_hours(reservation_start.time()):
            errors.append(START_OUTSIDE_HOURS)
        elif reservation_end > hours.closing_moment(reservation_start):
            errors.append(EXTENDS_BEYOND_CLOSING)

        return ValidationResult.from_errors(errors)

    @staticmethod
    def validate_operating_hours(
        open_time: time,
        close_time: time,
        is_overnight: bool = False
    ) -> ValidationResult:
        """Validate proposed hours without raising"""
        if not is_overnight and close_time <= open_time:
            return ValidationResult.failure(
                "Close time must be after open time for non-overnight hours"
            )
        return ValidationResult.success()

    # ==================== REPOSITORY BACKED ====================
    async def get_hours(self, restaurant_id: UUID, moment: datetime) -> Optional[OperatingHours]:
        """Hours for the weekday of `moment` in UTC"""
        day = DayOfWeek.of(as_naive_utc(moment))
        return await self.repository.find_by_restaurant_and_day(restaurant_id, day)

    async def is_within_operating_hours_at(self, restaurant_id: UUID, moment: datetime) -> bool:
        moment = as_naive_utc(moment)
        hours = await self.get_hours(restaurant_id, moment)
        return self.is_within_operating_hours(hours, moment.time())

    async def validate_reservation_time(
        self,
        restaurant_id: UUID,
        reservation_datetime: datetime
    ) -> ValidationResult:
        hours = await self.get_hours(restaurant_id, reservation_datetime)
        return self.validate_reservation_window(hours, reservation_datetime)


class AvailabilityService:
    """Combines hours, reservation conflicts and blocks into one verdict"""

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        operating_hours_repo: OperatingHoursRepository,
        availability_block_repo: AvailabilityBlockRepository
    ):
        self.reservation_repo = reservation_repo
        self.operating_hours = OperatingHoursService(operating_hours_repo)
        self.availability_block_repo = availability_block_repo

    async def is_table_available(self, table_id: UUID, start: datetime, end: datetime) -> bool:
        conflicts = await self.reservation_repo.find_conflicting(table_id, start, end)
        return not conflicts

    async def is_restaurant_open(self, restaurant_id: UUID, moment: datetime) -> bool:
        return await self.operating_hours.is_within_operating_hours_at(restaurant_id, moment)

    async def find_applicable_blocks(
        self,
        restaurant_id: UUID,
        table_id: UUID,
        start: datetime,
        end: datetime
    ) -> List[AvailabilityBlock]:
        """Restaurant-wide blocks and blocks on this table that intersect [start, end)"""
        blocks = await self.availability_block_repo.find_by_date_range(restaurant_id, start, end)
        return [
            block for block in blocks
            if block.applies_to_table(table_id) and block.conflicts_with(start, end)
        ]

    async def check_availability(
        self,
        restaurant_id: UUID,
        table_id: UUID,
        start: datetime,
        end: datetime
    ) -> ValidationResult:
        """Run every check and report all failures"""
        errors = []

        if not await self.is_restaurant_open(restaurant_id, start):
            errors.append(CLOSED_AT_TIME)

        if not await self.is_table_available(table_id, start, end):
            errors.append(TABLE_UNAVAILABLE)

        if await self.find_applicable_blocks(restaurant_id, table_id, start, end):
            errors.append(AVAILABILITY_RESTRICTED)

        if errors:
            logger.debug("Table %s unavailable from %s to %s: %s", table_id, start, end, errors)
        return ValidationResult.from_errors(errors)


class ReservationValidationService:
    """Full precondition check for creating a reservation"""

    def __init__(
        self,
        restaurant_repo: RestaurantRepository,
        table_repo: TableRepository,
        reservation_repo: ReservationRepository,
        operating_hours_repo: OperatingHoursRepository
    ):
        self.restaurant_repo = restaurant_repo
        self.table_repo = table_repo
        self.reservation_repo = reservation_repo
        self.operating_hours = OperatingHoursService(operating_hours_repo)

    async def validate_reservation(
        self,
        restaurant_id: UUID,
        table_id: UUID,
        reservation_datetime: datetime,
        party_size: int
    ) -> ValidationResult:
        # Nothing else can be checked without both aggregates
        restaurant = await self.restaurant_repo.find_by_id(restaurant_id)
        if restaurant is None:
            return ValidationResult.failure(RESTAURANT_NOT_FOUND)

        table = await self.table_repo.find_by_id(table_id)
        if table is None:
            return ValidationResult.failure(TABLE_NOT_FOUND)

        errors = []

        if not table.can_seat(party_size):
            errors.append(CAPACITY_INSUFFICIENT)

        if table.restaurant_id != restaurant_id:
            errors.append(TABLE_NOT_IN_RESTAURANT)

        hours = await self.operating_hours.get_hours(restaurant_id, reservation_datetime)
        if hours is None or not hours.is_open:
            errors.append(CLOSED_ON_DAY)
        else:
            window = self.operating_hours.validate_reservation_window(hours, reservation_datetime)
            errors.extend(window.errors)

        end_datetime = reservation_datetime + reservation_duration()
        conflicts = await self.reservation_repo.find_conflicting(table_id, reservation_datetime, end_datetime)
        if conflicts:
            errors.append(TABLE_UNAVAILABLE)

        return ValidationResult.from_errors(errors)


class TableAssignmentService:
    """Picks the smallest free table that seats the party"""

    def __init__(self, table_repo: TableRepository, reservation_repo: ReservationRepository):
        self.table_repo = table_repo
        self.reservation_repo = reservation_repo

    async def list_available_tables(
        self,
        restaurant_id: UUID,
        reservation_datetime: datetime,
        party_size: int
    ) -> List[Table]:
        """Tables that seat the party and have no conflicting reservation, in repository order"""
        tables = await self.table_repo.find_by_restaurant_id(restaurant_id)
        seats_party = table_by_minimum_capacity(party_size)
        end_datetime = reservation_datetime + reservation_duration()

        available = []
        for table in tables:
            if not seats_party.is_satisfied_by(table):
                continue
            conflicts = await self.reservation_repo.find_conflicting(
                table.table_id, reservation_datetime, end_datetime
            )
            if not conflicts:
                available.append(table)
        return available

    async def find_best_table(
        self,
        restaurant_id: UUID,
        reservation_datetime: datetime,
        party_size: int
    ) -> Optional[Table]:
        """Minimum capacity wins; ties go to the first table in repository order"""
        available = await self.list_available_tables(restaurant_id, reservation_datetime, party_size)
        if not available:
            return None
        return min(available, key=lambda t: t.capacity)


class BookingResult(BaseModel):
    """Outcome of a booking attempt"""
    reservation: Optional[Reservation] = None
    errors: List[str] = []

    @property
    def is_success(self) -> bool:
        return self.reservation is not None

    @classmethod
    def rejected(cls, *errors: str) -> "BookingResult":
        return cls(errors=list(errors))


class BookingService:
    """Service for booking use cases; persists through the unit of work"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.operating_hours = OperatingHoursService(uow.operating_hours)
        self.availability = AvailabilityService(
            uow.reservations, uow.operating_hours, uow.availability_blocks
        )
        self.validator = ReservationValidationService(
            uow.restaurants, uow.tables, uow.reservations, uow.operating_hours
        )
        self.assignment = TableAssignmentService(uow.tables, uow.reservations)

    # ==================== RESTAURANTS ====================
    async def register_restaurant(
        self,
        name: str,
        cuisine_type: str,
        description: str,
        address: str,
        phone_number: str,
        owner_id: UUID
    ) -> Restaurant:
        restaurant = Restaurant.create(
            name=name,
            cuisine_type=cuisine_type,
            description=description,
            address=address,
            phone_number=phone_number,
            owner_id=owner_id
        )
        async with self.uow:
            await self.uow.restaurants.save(restaurant)
        logger.info("Registered restaurant %s (%s)", restaurant.restaurant_id, restaurant.name)
        return restaurant

    async def get_restaurant(self, restaurant_id: UUID) -> Optional[Restaurant]:
        return await self.uow.restaurants.find_by_id(restaurant_id)

    async def list_restaurants(self) -> List[Restaurant]:
        return await self.uow.restaurants.find_all()

    async def get_owner_restaurants(self, owner_id: UUID) -> List[Restaurant]:
        return await self.uow.restaurants.find_by_owner_id(owner_id)

    async def set_restaurant_status(
        self,
        restaurant_id: UUID,
        status: RestaurantStatus
    ) -> Optional[Restaurant]:
        restaurant = await self.uow.restaurants.find_by_id(restaurant_id)
        if not restaurant:
            return None

        async with self.uow:
            restaurant.update_status(status)
            await self.uow.restaurants.update(restaurant)
        return restaurant

    # ==================== CUSTOMERS ====================
    async def register_customer(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str
    ) -> Customer:
        customer = Customer.create(first_name, last_name, email, phone_number)
        if await self.uow.customers.find_by_email(customer.email.value):
            raise DuplicateEntityError(f"A customer with email {customer.email} already exists")

        async with self.uow:
            await self.uow.customers.save(customer)
        return customer

    async def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return await self.uow.customers.find_by_id(customer_id)

    # ==================== TABLES ====================
    async def add_table(self, restaurant_id: UUID, table_number: str, capacity: int) -> Optional[Table]:
        """Add a table; table numbers are unique within a restaurant"""
        if not await self.uow.restaurants.find_by_id(restaurant_id):
            return None

        table = Table.create(table_number, capacity, restaurant_id)
        if await self.uow.tables.find_by_table_number(restaurant_id, table_number):
            raise DuplicateEntityError(f"Table number {table_number} already exists in this restaurant")

        async with self.uow:
            await self.uow.tables.save(table)
        return table

    async def list_tables(self, restaurant_id: UUID, status: Optional[TableStatus] = None) -> List[Table]:
        return await self.uow.tables.find_by_restaurant_id(restaurant_id, status)

    async def update_table_status(self, table_id: UUID, status: TableStatus) -> Optional[Table]:
        table = await self.uow.tables.find_by_id(table_id)
        if not table:
            return None

        async with self.uow:
            table.update_status(status)
            await self.uow.tables.update(table)
        return table

    async def update_table_capacity(self, table_id: UUID, capacity: int) -> Optional[Table]:
        table = await self.uow.tables.find_by_id(table_id)
        if not table:
            return None

        async with self.uow:
            table.update_capacity(capacity)
            await self.uow.tables.update(table)
        return table

    # ==================== OPERATING HOURS ====================
    async def set_operating_hours(
        self,
        restaurant_id: UUID,
        day_of_week: DayOfWeek,
        open_time: time,
        close_time: time,
        is_overnight: bool = False
    ) -> Optional[OperatingHours]:
        """Create or replace the hours of one day"""
        if not await self.uow.restaurants.find_by_id(restaurant_id):
            return None

        existing = await self.uow.operating_hours.find_by_restaurant_and_day(restaurant_id, day_of_week)
        async with self.uow:
            if existing:
                existing.update_hours(open_time, close_time, is_overnight)
                return await self.uow.operating_hours.update(existing)

            hours = OperatingHours.create(restaurant_id, day_of_week, open_time, close_time, is_overnight)
            return await self.uow.operating_hours.save(hours)

    async def close_day(self, restaurant_id: UUID, day_of_week: DayOfWeek) -> Optional[OperatingHours]:
        if not await self.uow.restaurants.find_by_id(restaurant_id):
            return None

        existing = await self.uow.operating_hours.find_by_restaurant_and_day(restaurant_id, day_of_week)
        async with self.uow:
            if existing:
                existing.set_closed()
                return await self.uow.operating_hours.update(existing)
            return await self.uow.operating_hours.save(
                OperatingHours.create_closed(restaurant_id, day_of_week)
            )

    async def get_operating_hours(self, restaurant_id: UUID) -> List[OperatingHours]:
        return await self.uow.operating_hours.find_by_restaurant_id(restaurant_id)

    # ==================== AVAILABILITY BLOCKS ====================
    async def add_availability_block(
        self,
        restaurant_id: UUID,
        start_datetime: datetime,
        end_datetime: datetime,
        reason: str,
        table_id: Optional[UUID] = None
    ) -> Optional[AvailabilityBlock]:
        if not await self.uow.restaurants.find_by_id(restaurant_id):
            return None

        if table_id is not None:
            table = await self.uow.tables.find_by_id(table_id)
            if table is None or table.restaurant_id != restaurant_id:
                raise InvariantViolationError(TABLE_NOT_IN_RESTAURANT, "table_id")

        block = AvailabilityBlock.create(restaurant_id, table_id, start_datetime, end_datetime, reason)
        async with self.uow:
            await self.uow.availability_blocks.save(block)
        logger.info("Added %s block %s for restaurant %s", block.block_type.value, block.block_id, restaurant_id)
        return block

    async def reschedule_availability_block(
        self,
        block_id: UUID,
        start_datetime: datetime,
        end_datetime: datetime,
        reason: Optional[str] = None
    ) -> Optional[AvailabilityBlock]:
        block = await self.uow.availability_blocks.find_by_id(block_id)
        if not block:
            return None

        async with self.uow:
            block.update_period(start_datetime, end_datetime)
            if reason is not None:
                block.update_reason(reason)
            await self.uow.availability_blocks.update(block)
        return block

    async def get_availability_blocks(self, restaurant_id: UUID) -> List[AvailabilityBlock]:
        return await self.uow.availability_blocks.find_by_restaurant_id(restaurant_id)

    async def remove_availability_block(self, block_id: UUID) -> bool:
        async with self.uow:
            return await self.uow.availability_blocks.delete(block_id)

    # ==================== RESERVATIONS ====================
    async def create_reservation(
        self,
        customer_id: UUID,
        restaurant_id: UUID,
        reservation_datetime: datetime,
        party_size: int,
        table_id: Optional[UUID] = None,
        special_requests: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> BookingResult:
        """Validate and book; assigns the best table when none is requested"""
        if not await self.uow.restaurants.find_by_id(restaurant_id):
            return BookingResult.rejected(RESTAURANT_NOT_FOUND)

        if not await self.uow.customers.find_by_id(customer_id):
            return BookingResult.rejected(CUSTOMER_NOT_FOUND)

        if table_id is None:
            table = await self._assign_table(restaurant_id, reservation_datetime, party_size)
            if table is None:
                logger.info("No table for party of %s at %s", party_size, reservation_datetime)
                return BookingResult.rejected(NO_TABLE_AVAILABLE)
            table_id = table.table_id

        validation = await self.validator.validate_reservation(
            restaurant_id, table_id, reservation_datetime, party_size
        )
        if validation.errors[:1] in ([RESTAURANT_NOT_FOUND], [TABLE_NOT_FOUND]):
            return BookingResult.rejected(*validation.errors)

        errors = list(validation.errors)
        end_datetime = reservation_datetime + reservation_duration()
        if await self.availability.find_applicable_blocks(
            restaurant_id, table_id, reservation_datetime, end_datetime
        ):
            errors.append(AVAILABILITY_RESTRICTED)

        if errors:
            logger.info("Rejected booking on table %s at %s: %s", table_id, reservation_datetime, errors)
            return BookingResult.rejected(*errors)

        reservation = Reservation.create(
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            table_id=table_id,
            reservation_datetime=reservation_datetime,
            party_size=party_size,
            special_requests=special_requests,
            now=now
        )
        async with self.uow:
            await self.uow.reservations.save(reservation)

        logger.info("Booked reservation %s on table %s", reservation.reservation_id, table_id)
        return BookingResult(reservation=reservation)

    async def _assign_table(
        self,
        restaurant_id: UUID,
        reservation_datetime: datetime,
        party_size: int
    ) -> Optional[Table]:
        """Smallest free table without a block over the reservation window.

        When every free table is blocked the smallest one is still returned,
        so the rejection names the availability restriction.
        """
        available = await self.assignment.list_available_tables(restaurant_id, reservation_datetime, party_size)
        end_datetime = reservation_datetime + reservation_duration()

        unblocked = []
        for table in available:
            blocks = await self.availability.find_applicable_blocks(
                restaurant_id, table.table_id, reservation_datetime, end_datetime
            )
            if not blocks:
                unblocked.append(table)

        candidates = unblocked or available
        if not candidates:
            return None
        return min(candidates, key=lambda t: t.capacity)

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self.uow.reservations.find_by_id(reservation_id)

    async def get_customer_reservations(self, customer_id: UUID) -> List[Reservation]:
        return await self.uow.reservations.find_by_customer_id(customer_id)

    async def get_restaurant_reservations(
        self,
        restaurant_id: UUID,
        start: datetime,
        end: datetime
    ) -> List[Reservation]:
        """Reservations of a restaurant starting between start and end"""
        in_restaurant = reservation_by_restaurant(restaurant_id)
        reservations = await self.uow.reservations.find_by_date_range(start, end)
        return sorted(
            (r for r in reservations if in_restaurant.is_satisfied_by(r)),
            key=lambda r: r.reservation_datetime
        )

    async def cancel_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, ReservationStatus.CANCELLED)

    async def complete_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, ReservationStatus.COMPLETED)

    async def mark_no_show(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, ReservationStatus.NO_SHOW)

    async def _transition(self, reservation_id: UUID, status: ReservationStatus) -> Optional[Reservation]:
        reservation = await self.uow.reservations.find_by_id(reservation_id)
        if not reservation:
            return None

        try:
            async with self.uow:
                reservation.update_status(status)
                await self.uow.reservations.update(reservation)
        except InvalidOperationError:
            logger.warning("Refused %s for reservation %s in status %s",
                           status.value, reservation_id, reservation.status.value)
            raise
        return reservation
