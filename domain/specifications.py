"""Domain Specifications - composable filtering predicates"""
from datetime import datetime
from typing import Callable, Generic, TypeVar
from uuid import UUID

from domain.entities import AvailabilityBlock, Reservation, Table
from domain.enums import ReservationStatus, TableStatus
from domain.value_objects import as_naive_utc

T = TypeVar("T")


class Specification(Generic[T]):
    """Wraps a predicate so it can be combined with &, | and ~"""

    def __init__(self, predicate: Callable[[T], bool]):
        self._predicate = predicate

    def is_satisfied_by(self, candidate: T) -> bool:
        return bool(self._predicate(candidate))

    __call__ = is_satisfied_by

    def __and__(self, other: "Specification[T]") -> "Specification[T]":
        return all_of(self, other)

    def __or__(self, other: "Specification[T]") -> "Specification[T]":
        return any_of(self, other)

    def __invert__(self) -> "Specification[T]":
        return negate(self)


def all_of(*specs: Specification) -> Specification:
    return Specification(lambda candidate: all(spec.is_satisfied_by(candidate) for spec in specs))


def any_of(*specs: Specification) -> Specification:
    return Specification(lambda candidate: any(spec.is_satisfied_by(candidate) for spec in specs))


def negate(spec: Specification) -> Specification:
    return Specification(lambda candidate: not spec.is_satisfied_by(candidate))


# ==================== RESERVATIONS ====================

def reservation_by_restaurant(restaurant_id: UUID) -> Specification[Reservation]:
    return Specification(lambda r: r.restaurant_id == restaurant_id)


def reservation_by_customer(customer_id: UUID) -> Specification[Reservation]:
    return Specification(lambda r: r.customer_id == customer_id)


def reservation_in_date_range(start: datetime, end: datetime) -> Specification[Reservation]:
    """Reservations starting between start and end, both inclusive"""
    start, end = as_naive_utc(start), as_naive_utc(end)
    return Specification(lambda r: start <= r.reservation_datetime <= end)


def reservation_by_status(status: ReservationStatus) -> Specification[Reservation]:
    return Specification(lambda r: r.status == status)


def reservation_conflicts(table_id: UUID, start: datetime, end: datetime) -> Specification[Reservation]:
    """Non-cancelled reservations on the table whose window intersects [start, end)"""
    return all_of(
        Specification(lambda r: r.table_id == table_id),
        negate(reservation_by_status(ReservationStatus.CANCELLED)),
        Specification(lambda r: r.overlaps(start, end)),
    )


# ==================== TABLES ====================

def table_by_restaurant(restaurant_id: UUID) -> Specification[Table]:
    return Specification(lambda t: t.restaurant_id == restaurant_id)


def table_by_minimum_capacity(minimum_capacity: int) -> Specification[Table]:
    return Specification(lambda t: t.capacity >= minimum_capacity)


def table_by_status(status: TableStatus) -> Specification[Table]:
    return Specification(lambda t: t.status == status)


# ==================== AVAILABILITY BLOCKS ====================

def block_for_restaurant_in_range(
    restaurant_id: UUID,
    start: datetime,
    end: datetime
) -> Specification[AvailabilityBlock]:
    """Blocks of the restaurant intersecting [start, end)"""
    return Specification(
        lambda b: b.restaurant_id == restaurant_id and b.conflicts_with(start, end)
    )
