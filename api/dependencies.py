"""API Dependencies - service wiring"""
from fastapi import Depends

from application.services import (
    AvailabilityService, BookingService, OperatingHoursService,
    ReservationValidationService, TableAssignmentService
)
from domain.repositories import UnitOfWork
from infrastructure.repositories.in_memory_repositories import (
    InMemoryAvailabilityBlockRepository, InMemoryCustomerRepository, InMemoryOperatingHoursRepository,
    InMemoryReservationRepository, InMemoryRestaurantRepository, InMemoryTableRepository,
    InMemoryUnitOfWork
)

# Shared storage; each request gets its own unit of work over it
restaurant_repo = InMemoryRestaurantRepository()
customer_repo = InMemoryCustomerRepository()
table_repo = InMemoryTableRepository()
operating_hours_repo = InMemoryOperatingHoursRepository()
availability_block_repo = InMemoryAvailabilityBlockRepository()
reservation_repo = InMemoryReservationRepository()


def get_unit_of_work() -> UnitOfWork:
    return InMemoryUnitOfWork(
        restaurants=restaurant_repo,
        customers=customer_repo,
        tables=table_repo,
        operating_hours=operating_hours_repo,
        availability_blocks=availability_block_repo,
        reservations=reservation_repo
    )


def get_booking_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> BookingService:
    return BookingService(uow)


def get_operating_hours_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> OperatingHoursService:
    return OperatingHoursService(uow.operating_hours)


def get_availability_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> AvailabilityService:
    return AvailabilityService(uow.reservations, uow.operating_hours, uow.availability_blocks)


def get_validation_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> ReservationValidationService:
    return ReservationValidationService(uow.restaurants, uow.tables, uow.reservations, uow.operating_hours)


def get_table_assignment_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> TableAssignmentService:
    return TableAssignmentService(uow.tables, uow.reservations)
