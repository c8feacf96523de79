"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from domain.entities import AvailabilityBlock, Customer, OperatingHours, Reservation, Restaurant, Table
from domain.enums import DayOfWeek, TableStatus


class RestaurantRepository(ABC):
    """Repository interface for Restaurant Aggregate"""

    @abstractmethod
    async def save(self, restaurant: Restaurant) -> Restaurant:
        """Save restaurant"""
        pass

    @abstractmethod
    async def find_by_id(self, restaurant_id: UUID) -> Optional[Restaurant]:
        """Find restaurant by ID"""
        pass

    @abstractmethod
    async def find_by_owner_id(self, owner_id: UUID) -> List[Restaurant]:
        """Find restaurants of an owner"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Restaurant]:
        """Find all restaurants"""
        pass

    @abstractmethod
    async def update(self, restaurant: Restaurant) -> Restaurant:
        """Update restaurant"""
        pass


class CustomerRepository(ABC):
    """Repository interface for Customer entity"""

    @abstractmethod
    async def save(self, customer: Customer) -> Customer:
        """Save customer"""
        pass

    @abstractmethod
    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        """Find customer by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Customer]:
        """Find customer by email, ignoring case"""
        pass


class TableRepository(ABC):
    """Repository interface for Table entity"""

    @abstractmethod
    async def save(self, table: Table) -> Table:
        """Save table"""
        pass

    @abstractmethod
    async def find_by_id(self, table_id: UUID) -> Optional[Table]:
        """Find table by ID"""
        pass

    @abstractmethod
    async def find_by_restaurant_id(
        self,
        restaurant_id: UUID,
        status: Optional[TableStatus] = None
    ) -> List[Table]:
        """Find tables of a restaurant in insertion order, optionally by status"""
        pass

    @abstractmethod
    async def find_by_table_number(self, restaurant_id: UUID, table_number: str) -> Optional[Table]:
        """Find table by its number within a restaurant"""
        pass

    @abstractmethod
    async def update(self, table: Table) -> Table:
        """Update table"""
        pass


class OperatingHoursRepository(ABC):
    """Repository interface for OperatingHours entity"""

    @abstractmethod
    async def save(self, operating_hours: OperatingHours) -> OperatingHours:
        """Save operating hours"""
        pass

    @abstractmethod
    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[OperatingHours]:
        """Find the weekly hours of a restaurant"""
        pass

    @abstractmethod
    async def find_by_restaurant_and_day(
        self,
        restaurant_id: UUID,
        day_of_week: DayOfWeek
    ) -> Optional[OperatingHours]:
        """Find hours for one day of the week"""
        pass

    @abstractmethod
    async def update(self, operating_hours: OperatingHours) -> OperatingHours:
        """Update operating hours"""
        pass


class AvailabilityBlockRepository(ABC):
    """Repository interface for AvailabilityBlock entity"""

    @abstractmethod
    async def save(self, block: AvailabilityBlock) -> AvailabilityBlock:
        """Save availability block"""
        pass

    @abstractmethod
    async def find_by_id(self, block_id: UUID) -> Optional[AvailabilityBlock]:
        """Find availability block by ID"""
        pass

    @abstractmethod
    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[AvailabilityBlock]:
        """Find all blocks of a restaurant"""
        pass

    @abstractmethod
    async def find_by_date_range(
        self,
        restaurant_id: UUID,
        start: datetime,
        end: datetime
    ) -> List[AvailabilityBlock]:
        """Find blocks of a restaurant intersecting [start, end)"""
        pass

    @abstractmethod
    async def update(self, block: AvailabilityBlock) -> AvailabilityBlock:
        """Update availability block"""
        pass

    @abstractmethod
    async def delete(self, block_id: UUID) -> bool:
        """Delete availability block"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_by_customer_id(self, customer_id: UUID) -> List[Reservation]:
        """Find reservations of a customer"""
        pass

    @abstractmethod
    async def find_by_restaurant_id(self, restaurant_id: UUID) -> List[Reservation]:
        """Find reservations of a restaurant"""
        pass

    @abstractmethod
    async def find_by_date_range(self, start: datetime, end: datetime) -> List[Reservation]:
        """Find reservations starting within [start, end]"""
        pass

    @abstractmethod
    async def find_conflicting(self, table_id: UUID, start: datetime, end: datetime) -> List[Reservation]:
        """Find non-cancelled reservations on the table overlapping [start, end)"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass


class UnitOfWork(ABC):
    """Transaction boundary around a set of repository mutations

    Used as ``async with uow:``; the block commits on success and rolls back
    when an exception escapes it.
    """

    restaurants: RestaurantRepository
    customers: CustomerRepository
    tables: TableRepository
    operating_hours: OperatingHoursRepository
    availability_blocks: AvailabilityBlockRepository
    reservations: ReservationRepository

    @abstractmethod
    async def save_changes(self) -> int:
        """Persist staged changes, returning how many entities were written"""
        pass

    @abstractmethod
    async def begin(self) -> None:
        """Open an explicit transaction"""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the open transaction"""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard changes made since begin()"""
        pass

    async def __aenter__(self) -> "UnitOfWork":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.rollback()
            return
        await self.save_changes()
        await self.commit()
