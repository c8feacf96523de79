"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import datetime, time
from uuid import UUID
from typing import List, Optional

from domain.enums import BlockType, DayOfWeek, ReservationStatus, RestaurantStatus, TableStatus


# ============================================================================
# RESTAURANT SCHEMAS
# ============================================================================

class CreateRestaurantRequest(BaseModel):
    """Create restaurant request DTO"""
    owner_id: UUID
    name: str
    cuisine_type: str
    description: str
    address: str
    phone_number: str


class UpdateRestaurantStatusRequest(BaseModel):
    """Update restaurant status request DTO"""
    status: RestaurantStatus


class RestaurantResponse(BaseModel):
    """Restaurant response DTO"""
    restaurant_id: UUID
    owner_id: UUID
    name: str
    cuisine_type: str
    description: str
    address: str
    phone_number: str
    status: RestaurantStatus
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# CUSTOMER SCHEMAS
# ============================================================================

class CreateCustomerRequest(BaseModel):
    """Create customer request DTO"""
    first_name: str
    last_name: str
    email: str
    phone_number: str


class CustomerResponse(BaseModel):
    """Customer response DTO"""
    customer_id: UUID
    first_name: str
    last_name: str
    email: str
    phone_number: str
    created_at: datetime


# ============================================================================
# TABLE SCHEMAS
# ============================================================================

class CreateTableRequest(BaseModel):
    """Create table request DTO"""
    table_number: str
    capacity: int


class UpdateTableStatusRequest(BaseModel):
    """Update table status request DTO"""
    status: TableStatus


class UpdateTableCapacityRequest(BaseModel):
    """Update table capacity request DTO"""
    capacity: int


class TableResponse(BaseModel):
    """Table response DTO"""
    table_id: UUID
    restaurant_id: UUID
    table_number: str
    capacity: int
    status: TableStatus
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# OPERATING HOURS SCHEMAS
# ============================================================================

class SetOperatingHoursRequest(BaseModel):
    """Set operating hours request DTO"""
    open_time: time
    close_time: time
    is_overnight: bool = False


class OperatingHoursResponse(BaseModel):
    """Operating hours response DTO"""
    hours_id: UUID
    restaurant_id: UUID
    day_of_week: DayOfWeek
    open_time: time
    close_time: time
    is_open: bool
    is_overnight: bool

    class Config:
        from_attributes = True


# ============================================================================
# AVAILABILITY BLOCK SCHEMAS
# ============================================================================

class CreateAvailabilityBlockRequest(BaseModel):
    """Create availability block request DTO"""
    start_datetime: datetime
    end_datetime: datetime
    reason: str
    table_id: Optional[UUID] = None


class RescheduleAvailabilityBlockRequest(BaseModel):
    """Reschedule availability block request DTO"""
    start_datetime: datetime
    end_datetime: datetime
    reason: Optional[str] = None


class AvailabilityBlockResponse(BaseModel):
    """Availability block response DTO"""
    block_id: UUID
    restaurant_id: UUID
    table_id: Optional[UUID] = None
    start_datetime: datetime
    end_datetime: datetime
    reason: str
    block_type: BlockType

    class Config:
        from_attributes = True


# ============================================================================
# AVAILABILITY & RESERVATION SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    restaurant_id: UUID
    table_id: UUID
    start_datetime: datetime
    end_datetime: datetime


class ValidateReservationRequest(BaseModel):
    """Validate reservation request DTO"""
    restaurant_id: UUID
    table_id: UUID
    reservation_datetime: datetime
    party_size: int = Field(ge=1)


class CreateReservationRequest(BaseModel):
    """Create reservation request DTO; the best table is assigned when table_id is omitted"""
    customer_id: UUID
    restaurant_id: UUID
    reservation_datetime: datetime
    party_size: int
    table_id: Optional[UUID] = None
    special_requests: Optional[str] = None


class ValidationResponse(BaseModel):
    """Verdict with every failed reason"""
    is_valid: bool
    errors: List[str] = []


class OpeningCheckResponse(BaseModel):
    """Whether a moment is inside opening hours and a reservation starting then fits"""
    is_open: bool
    reservation_window: ValidationResponse


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    customer_id: UUID
    restaurant_id: UUID
    table_id: UUID
    reservation_datetime: datetime
    end_datetime: datetime
    party_size: int
    special_requests: str
    status: ReservationStatus
    created_at: datetime

    class Config:
        from_attributes = True
