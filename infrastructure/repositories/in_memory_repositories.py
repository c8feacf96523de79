"""In-Memory Repository Implementations"""
import copy
import logging
from typing import Optional, List, Dict
from uuid import UUID
from datetime import datetime

from domain.repositories import (
    AvailabilityBlockRepository, CustomerRepository, OperatingHoursRepository,
    ReservationRepository, RestaurantRepository, TableRepository, UnitOfWork
)
from domain.entities import AvailabilityBlock, Customer, OperatingHours, Reservation, Restaurant, Table
from domain.enums import DayOfWeek, TableStatus
from domain.specifications import (
    block_for_restaurant_in_range, reservation_by_customer, reservation_by_restaurant,
    reservation_conflicts, reservation_in_date_range, table_by_restaurant, table_by_status
)

logger = logging.getLogger(__name__)


class _InMemoryStorage:
    """Dict-backed storage with a count of writes not yet saved"""

    def __init__(self):
        self._storage: Dict[UUID, object] = {}
        self.pending_changes = 0

    def _put(self, key: UUID, entity):
        self._storage[key] = entity
        self.pending_changes += 1
        return entity

    def _replace(self, key: UUID, entity, label: str):
        if key not in self._storage:
            raise ValueError(f"{label} not found")
        return self._put(key, entity)

    def _remove(self, key: UUID) -> bool:
        if key in self._storage:
            del self._storage[key]
            self.pending_changes += 1
            return True
        return False

    def snapshot(self) -> Dict[UUID, object]:
        return copy.deepcopy(self._storage)

    def restore(self, snapshot: Dict[UUID, object]) -> None:
        self._storage = snapshot
        self.pending_changes = 0


class InMemoryRestaurantRepository(_InMemoryStorage, RestaurantRepository):
    """In-memory implementation of RestaurantRepository"""

    async def save(self, restaurant: Restaurant) -> Restaurant:
        return self._put(restaurant.restaurant_id, restaurant)

    async def find_by_id(self, restaurant_id: UUID) -> Optional[Restaurant]:
        return self._storage.get(restaurant_id)

    async def find_by_owner_id(self, owner_id: UUID) -> List[Restaurant]:
        return [r for r in self._storage.values() if r.owner_id == owner_id]

    async def find_all(self) -> List[Restaurant]:
        return list(self._storage.values())

    async def update(self, restaurant: Restaurant) -> Restaurant:
        return self._replace(restaurant.restaurant_id, restaurant, "Restaurant")


class InMemoryCustomerRepository(_InMemoryStorage, CustomerRepository):
    """In-memory implementation of CustomerRepository"""

    async def save(self, customer: Customer) -> Customer:
        return self._put(customer.customer_id, customer)

    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        return self._storage.get(customer_id)

    async def find_by_email(self, email: str) -> Optional[Customer]:
        wanted = email.lower()
        for customer in self._storage.values():
            if customer.email.value == wanted:
                return customer
        return None


class InMemoryTableRepository(_InMemoryStorage, TableRepository):
    """In-memory implementation of TableRepository"""

    async def save(self, table: Table) -> Table:
        return self._put(table.table_id, table)

    async def find_by_id(self, table_id: UUID) -> Optional[Table]:
        return self._storage.get(table_id)

    async def find_by_restaurant_id(
        self,
        restaurant_id: UUID,
        status: Optional[TableStatus] = None
    ) -> List[Table]:
        spec = table_by_restaurant(restaurant_id)
        if status is not None:
            spec = spec & table_by_status(status)
        return [t for t in self._storage.values() if spec.is_satisfied_by(t)]

    async def find_by_table_number(self, restaurant_id: UUID, table_number: str) -> Optional[Table]:
        for table in self._storage.values():
            if table.restaurant_id == restaurant_id and table.table_number == table_number:
                return table
        return None

    async def update(self, table: Table) -> Table:
        return self._replace(table.table_id, table, "Table")


class InMemoryOperatingHoursRepository(_InMemoryStorage, OperatingHoursRepository):
    """In-memory implementation of OperatingHoursRepository"""

    async def save(self, operating_hours: OperatingHours) -> OperatingHours:
        return self._put(operating_hours.hours_id, operating_hours)

    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[OperatingHours]:
        hours = [h for h in self._storage.values() if h.restaurant_id == restaurant_id]
        return sorted(hours, key=lambda h: h.day_of_week)

    async def find_by_restaurant_and_day(
        self,
        restaurant_id: UUID,
        day_of_week: DayOfWeek
    ) -> Optional[OperatingHours]:
        for hours in self._storage.values():
            if hours.restaurant_id == restaurant_id and hours.day_of_week == day_of_week:
                return hours
        return None

    async def update(self, operating_hours: OperatingHours) -> OperatingHours:
        return self._replace(operating_hours.hours_id, operating_hours, "Operating hours")


class InMemoryAvailabilityBlockRepository(_InMemoryStorage, AvailabilityBlockRepository):
    """In-memory implementation of AvailabilityBlockRepository"""

    async def save(self, block: AvailabilityBlock) -> AvailabilityBlock:
        return self._put(block.block_id, block)

    async def find_by_id(self, block_id: UUID) -> Optional[AvailabilityBlock]:
        return self._storage.get(block_id)

    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[AvailabilityBlock]:
        return [b for b in self._storage.values() if b.restaurant_id == restaurant_id]

    async def find_by_date_range(
        self,
        restaurant_id: UUID,
        start: datetime,
        end: datetime
    ) -> List[AvailabilityBlock]:
        spec = block_for_restaurant_in_range(restaurant_id, start, end)
        return [b for b in self._storage.values() if spec.is_satisfied_by(b)]

    async def update(self, block: AvailabilityBlock) -> AvailabilityBlock:
        return self._replace(block.block_id, block, "Availability block")

    async def delete(self, block_id: UUID) -> bool:
        return self._remove(block_id)


class InMemoryReservationRepository(_InMemoryStorage, ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    async def save(self, reservation: Reservation) -> Reservation:
        return self._put(reservation.reservation_id, reservation)

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        return self._storage.get(reservation_id)

    async def find_by_customer_id(self, customer_id: UUID) -> List[Reservation]:
        spec = reservation_by_customer(customer_id)
        return [r for r in self._storage.values() if spec.is_satisfied_by(r)]

    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[Reservation]:
        spec = reservation_by_restaurant(restaurant_id)
        return [r for r in self._storage.values() if spec.is_satisfied_by(r)]

    async def find_by_date_range(self, start: datetime, end: datetime) -> List[Reservation]:
        spec = reservation_in_date_range(start, end)
        return [r for r in self._storage.values() if spec.is_satisfied_by(r)]

    async def find_conflicting(self, table_id: UUID, start: datetime, end: datetime) -> List[Reservation]:
        spec = reservation_conflicts(table_id, start, end)
        return [r for r in self._storage.values() if spec.is_satisfied_by(r)]

    async def update(self, reservation: Reservation) -> Reservation:
        return self._replace(reservation.reservation_id, reservation, "Reservation")


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of work over in-memory repositories

    Writes land in the repositories immediately; begin() snapshots them so
    rollback() can restore the previous state. It does not serialize
    concurrent transactions.
    """

    def __init__(
        self,
        restaurants: Optional[InMemoryRestaurantRepository] = None,
        customers: Optional[InMemoryCustomerRepository] = None,
        tables: Optional[InMemoryTableRepository] = None,
        operating_hours: Optional[InMemoryOperatingHoursRepository] = None,
        availability_blocks: Optional[InMemoryAvailabilityBlockRepository] = None,
        reservations: Optional[InMemoryReservationRepository] = None
    ):
        self.restaurants = restaurants or InMemoryRestaurantRepository()
        self.customers = customers or InMemoryCustomerRepository()
        self.tables = tables or InMemoryTableRepository()
        self.operating_hours = operating_hours or InMemoryOperatingHoursRepository()
        self.availability_blocks = availability_blocks or InMemoryAvailabilityBlockRepository()
        self.reservations = reservations or InMemoryReservationRepository()
        self._snapshots: Optional[List[Dict[UUID, object]]] = None

    def _repositories(self) -> List[_InMemoryStorage]:
        return [
            self.restaurants, self.customers, self.tables,
            self.operating_hours, self.availability_blocks, self.reservations
        ]

    @property
    def in_transaction(self) -> bool:
        return self._snapshots is not None

    async def save_changes(self) -> int:
        written = 0
        for repository in self._repositories():
            written += repository.pending_changes
            repository.pending_changes = 0
        return written

    async def begin(self) -> None:
        # Services mutate stored entities in place before writing them back, so
        # every repository is copied up front. Cost grows with the whole store.
        self._snapshots = [repository.snapshot() for repository in self._repositories()]

    async def commit(self) -> None:
        self._snapshots = None

    async def rollback(self) -> None:
        if self._snapshots is None:
            return
        for repository, snapshot in zip(self._repositories(), self._snapshots):
            repository.restore(snapshot)
        self._snapshots = None
        logger.info("Rolled back in-memory transaction")
