from fastapi import FastAPI, HTTPException, Depends, Query
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from api.schemas import (
    # Restaurant
    CreateRestaurantRequest, UpdateRestaurantStatusRequest, RestaurantResponse,
    # Customer
    CreateCustomerRequest, CustomerResponse,
    # Table
    CreateTableRequest, UpdateTableStatusRequest, UpdateTableCapacityRequest, TableResponse,
    # Operating hours
    SetOperatingHoursRequest, OperatingHoursResponse, OpeningCheckResponse,
    # Availability blocks
    CreateAvailabilityBlockRequest, RescheduleAvailabilityBlockRequest, AvailabilityBlockResponse,
    # Availability & reservations
    CheckAvailabilityRequest, ValidateReservationRequest, CreateReservationRequest,
    ValidationResponse, ReservationResponse
)
from api.dependencies import (
    get_availability_service, get_booking_service, get_operating_hours_service,
    get_table_assignment_service, get_validation_service
)
from application.services import (
    AvailabilityService, BookingService, OperatingHoursService,
    ReservationValidationService, TableAssignmentService,
    CUSTOMER_NOT_FOUND, RESTAURANT_NOT_FOUND, TABLE_NOT_FOUND
)
from config import configure_logging, get_settings
from domain.enums import BlockType, DayOfWeek, ReservationStatus, RestaurantStatus, TableStatus
from domain.exceptions import DuplicateEntityError, InvalidOperationError
from domain.value_objects import ValidationResult

settings = get_settings()
configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    description="Table booking against opening hours, reservations and availability blocks",
    version=settings.version
)

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.value for item in ReservationStatus],
        "description": "CONFIRMED is initial; CANCELLED, COMPLETED and NO_SHOW are terminal"
    }

@app.get("/api/enums/table-status", tags=["Enum Reference"])
async def get_table_statuses():
    """Get all TableStatus enum values"""
    return {"values": [item.value for item in TableStatus]}

@app.get("/api/enums/restaurant-status", tags=["Enum Reference"])
async def get_restaurant_statuses():
    """Get all RestaurantStatus enum values"""
    return {
        "values": [item.value for item in RestaurantStatus],
        "description": "SUSPENDED restaurants must become INACTIVE before ACTIVE"
    }

@app.get("/api/enums/block-type", tags=["Enum Reference"])
async def get_block_types():
    """Get all BlockType enum values"""
    return {"values": [item.value for item in BlockType]}

@app.get("/api/enums/day-of-week", tags=["Enum Reference"])
async def get_days_of_week():
    """Get all DayOfWeek enum values"""
    return {"values": {item.name: item.value for item in DayOfWeek}}

# ============================================================================
# RESTAURANT ENDPOINTS
# ============================================================================

@app.post("/api/restaurants", response_model=RestaurantResponse, status_code=201, tags=["Restaurants"])
async def create_restaurant(
    request: CreateRestaurantRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Register a restaurant"""
    try:
        restaurant = await service.register_restaurant(
            name=request.name,
            cuisine_type=request.cuisine_type,
            description=request.description,
            address=request.address,
            phone_number=request.phone_number,
            owner_id=request.owner_id
        )
        return _restaurant_to_response(restaurant)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/restaurants", response_model=List[RestaurantResponse], tags=["Restaurants"])
async def get_restaurants(service: BookingService = Depends(get_booking_service)):
    """Get all restaurants"""
    restaurants = await service.list_restaurants()
    return [_restaurant_to_response(r) for r in restaurants]

@app.get("/api/owners/{owner_id}/restaurants", response_model=List[RestaurantResponse], tags=["Restaurants"])
async def get_owner_restaurants(owner_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get the restaurants of an owner"""
    restaurants = await service.get_owner_restaurants(owner_id)
    return [_restaurant_to_response(r) for r in restaurants]

@app.get("/api/restaurants/{restaurant_id}", response_model=RestaurantResponse, tags=["Restaurants"])
async def get_restaurant(restaurant_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get restaurant by ID"""
    restaurant = await service.get_restaurant(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _restaurant_to_response(restaurant)

@app.put("/api/restaurants/{restaurant_id}/status", response_model=RestaurantResponse, tags=["Restaurants"])
async def update_restaurant_status(
    restaurant_id: UUID,
    request: UpdateRestaurantStatusRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Change restaurant status"""
    try:
        restaurant = await service.set_restaurant_status(restaurant_id, request.status)
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _restaurant_to_response(restaurant)

# ============================================================================
# CUSTOMER ENDPOINTS
# ============================================================================

@app.post("/api/customers", response_model=CustomerResponse, status_code=201, tags=["Customers"])
async def create_customer(
    request: CreateCustomerRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Register a customer"""
    try:
        customer = await service.register_customer(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone_number=request.phone_number
        )
        return _customer_to_response(customer)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/customers/{customer_id}", response_model=CustomerResponse, tags=["Customers"])
async def get_customer(customer_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get customer by ID"""
    customer = await service.get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return _customer_to_response(customer)

# ============================================================================
# TABLE ENDPOINTS
# ============================================================================

@app.post("/api/restaurants/{restaurant_id}/tables", response_model=TableResponse, status_code=201, tags=["Tables"])
async def create_table(
    restaurant_id: UUID,
    request: CreateTableRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Add a table to a restaurant"""
    try:
        table = await service.add_table(restaurant_id, request.table_number, request.capacity)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not table:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _table_to_response(table)

@app.get("/api/restaurants/{restaurant_id}/tables", response_model=List[TableResponse], tags=["Tables"])
async def get_tables(
    restaurant_id: UUID,
    status: Optional[TableStatus] = None,
    service: BookingService = Depends(get_booking_service)
):
    """Get the tables of a restaurant"""
    tables = await service.list_tables(restaurant_id, status)
    return [_table_to_response(t) for t in tables]

@app.put("/api/tables/{table_id}/status", response_model=TableResponse, tags=["Tables"])
async def update_table_status(
    table_id: UUID,
    request: UpdateTableStatusRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Change table status"""
    table = await service.update_table_status(table_id, request.status)
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    return _table_to_response(table)

@app.put("/api/tables/{table_id}/capacity", response_model=TableResponse, tags=["Tables"])
async def update_table_capacity(
    table_id: UUID,
    request: UpdateTableCapacityRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Change table capacity"""
    try:
        table = await service.update_table_capacity(table_id, request.capacity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    return _table_to_response(table)

# ============================================================================
# OPERATING HOURS ENDPOINTS
# ============================================================================

@app.put("/api/restaurants/{restaurant_id}/operating-hours/{day}", response_model=OperatingHoursResponse,
         tags=["Operating Hours"])
async def set_operating_hours(
    restaurant_id: UUID,
    day: str,
    request: SetOperatingHoursRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Set the opening hours of one day, e.g. /operating-hours/monday"""
    try:
        hours = await service.set_operating_hours(
            restaurant_id, _parse_day(day), request.open_time, request.close_time, request.is_overnight
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not hours:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _hours_to_response(hours)

@app.delete("/api/restaurants/{restaurant_id}/operating-hours/{day}", response_model=OperatingHoursResponse,
            tags=["Operating Hours"])
async def close_day(
    restaurant_id: UUID,
    day: str,
    service: BookingService = Depends(get_booking_service)
):
    """Mark a day as closed"""
    hours = await service.close_day(restaurant_id, _parse_day(day))
    if not hours:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _hours_to_response(hours)

@app.get("/api/restaurants/{restaurant_id}/operating-hours", response_model=List[OperatingHoursResponse],
         tags=["Operating Hours"])
async def get_operating_hours(restaurant_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get the weekly opening hours"""
    hours = await service.get_operating_hours(restaurant_id)
    return [_hours_to_response(h) for h in hours]

@app.get("/api/restaurants/{restaurant_id}/opening-check", response_model=OpeningCheckResponse,
         tags=["Operating Hours"])
async def check_opening(
    restaurant_id: UUID,
    at: datetime = Query(..., description="Moment to check"),
    service: OperatingHoursService = Depends(get_operating_hours_service)
):
    """Check a moment against opening hours and whether a reservation starting then fits"""
    is_open = await service.is_within_operating_hours_at(restaurant_id, at)
    window = await service.validate_reservation_time(restaurant_id, at)
    return OpeningCheckResponse(is_open=is_open, reservation_window=_validation_to_response(window))

# ============================================================================
# AVAILABILITY BLOCK ENDPOINTS
# ============================================================================

@app.post("/api/restaurants/{restaurant_id}/availability-blocks", response_model=AvailabilityBlockResponse,
          status_code=201, tags=["Availability Blocks"])
async def create_availability_block(
    restaurant_id: UUID,
    request: CreateAvailabilityBlockRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Block a table or the whole restaurant"""
    try:
        block = await service.add_availability_block(
            restaurant_id, request.start_datetime, request.end_datetime, request.reason, request.table_id
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not block:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return _block_to_response(block)

@app.get("/api/restaurants/{restaurant_id}/availability-blocks", response_model=List[AvailabilityBlockResponse],
         tags=["Availability Blocks"])
async def get_availability_blocks(restaurant_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get the availability blocks of a restaurant"""
    blocks = await service.get_availability_blocks(restaurant_id)
    return [_block_to_response(b) for b in blocks]

@app.put("/api/availability-blocks/{block_id}", response_model=AvailabilityBlockResponse,
         tags=["Availability Blocks"])
async def reschedule_availability_block(
    block_id: UUID,
    request: RescheduleAvailabilityBlockRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Move an availability block and optionally change its reason"""
    try:
        block = await service.reschedule_availability_block(
            block_id, request.start_datetime, request.end_datetime, request.reason
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not block:
        raise HTTPException(status_code=404, detail="Availability block not found")
    return _block_to_response(block)

@app.delete("/api/availability-blocks/{block_id}", status_code=204, tags=["Availability Blocks"])
async def delete_availability_block(block_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Remove an availability block"""
    if not await service.remove_availability_block(block_id):
        raise HTTPException(status_code=404, detail="Availability block not found")

# ============================================================================
# AVAILABILITY & ASSIGNMENT ENDPOINTS
# ============================================================================

@app.post("/api/availability/check", response_model=ValidationResponse, tags=["Availability"])
async def check_availability(
    request: CheckAvailabilityRequest,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Check a table window against hours, reservations and blocks"""
    result = await service.check_availability(
        request.restaurant_id, request.table_id, request.start_datetime, request.end_datetime
    )
    return _validation_to_response(result)

@app.get("/api/restaurants/{restaurant_id}/available-tables", response_model=List[TableResponse],
         tags=["Availability"])
async def get_available_tables(
    restaurant_id: UUID,
    start: datetime = Query(...),
    party_size: int = Query(..., ge=1),
    service: TableAssignmentService = Depends(get_table_assignment_service)
):
    """List tables that seat the party and are free for the reservation window"""
    tables = await service.list_available_tables(restaurant_id, start, party_size)
    return [_table_to_response(t) for t in tables]

@app.get("/api/restaurants/{restaurant_id}/best-table", response_model=TableResponse, tags=["Availability"])
async def get_best_table(
    restaurant_id: UUID,
    start: datetime = Query(...),
    party_size: int = Query(..., ge=1),
    service: TableAssignmentService = Depends(get_table_assignment_service)
):
    """Smallest free table that seats the party"""
    table = await service.find_best_table(restaurant_id, start, party_size)
    if not table:
        raise HTTPException(status_code=404, detail="No table available")
    return _table_to_response(table)

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations/validate", response_model=ValidationResponse, tags=["Reservations"])
async def validate_reservation(
    request: ValidateReservationRequest,
    service: ReservationValidationService = Depends(get_validation_service)
):
    """Report every reason a reservation would be rejected"""
    result = await service.validate_reservation(
        request.restaurant_id, request.table_id, request.reservation_datetime, request.party_size
    )
    return _validation_to_response(result)

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Book a table; unknown references return 404, other rejections 422 listing every reason"""
    try:
        result = await service.create_reservation(
            customer_id=request.customer_id,
            restaurant_id=request.restaurant_id,
            reservation_datetime=request.reservation_datetime,
            party_size=request.party_size,
            table_id=request.table_id,
            special_requests=request.special_requests
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not result.is_success:
        if result.errors[0] in (RESTAURANT_NOT_FOUND, CUSTOMER_NOT_FOUND, TABLE_NOT_FOUND):
            raise HTTPException(status_code=404, detail=result.errors[0])
        raise HTTPException(
            status_code=422,
            detail=ValidationResponse(is_valid=False, errors=result.errors).model_dump()
        )
    return _reservation_to_response(result.reservation)

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(reservation_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.get("/api/reservations/customer/{customer_id}", response_model=List[ReservationResponse],
         tags=["Reservations"])
async def get_customer_reservations(customer_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Get all reservations of a customer"""
    reservations = await service.get_customer_reservations(customer_id)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/restaurants/{restaurant_id}/reservations", response_model=List[ReservationResponse],
         tags=["Reservations"])
async def get_restaurant_reservations(
    restaurant_id: UUID,
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: BookingService = Depends(get_booking_service)
):
    """Get reservations of a restaurant starting between start and end"""
    reservations = await service.get_restaurant_reservations(restaurant_id, start, end)
    return [_reservation_to_response(r) for r in reservations]

@app.post("/api/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(reservation_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Cancel reservation"""
    return await _apply_transition(service.cancel_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/complete", response_model=ReservationResponse, tags=["Reservations"])
async def complete_reservation(reservation_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Mark reservation as completed"""
    return await _apply_transition(service.complete_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/no-show", response_model=ReservationResponse, tags=["Reservations"])
async def mark_no_show(reservation_id: UUID, service: BookingService = Depends(get_booking_service)):
    """Mark reservation as no-show"""
    return await _apply_transition(service.mark_no_show, reservation_id)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

async def _apply_transition(transition, reservation_id: UUID) -> ReservationResponse:
    try:
        reservation = await transition(reservation_id)
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

def _parse_day(day: str) -> DayOfWeek:
    try:
        return DayOfWeek[day.upper()]
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown day of week: {day}")

def _validation_to_response(result: ValidationResult) -> ValidationResponse:
    return ValidationResponse(is_valid=result.is_valid, errors=list(result.errors))

def _restaurant_to_response(restaurant) -> RestaurantResponse:
    """Convert Restaurant entity to RestaurantResponse"""
    return RestaurantResponse(
        restaurant_id=restaurant.restaurant_id,
        owner_id=restaurant.owner_id,
        name=restaurant.name,
        cuisine_type=restaurant.cuisine_type,
        description=restaurant.description,
        address=restaurant.address,
        phone_number=restaurant.phone_number,
        status=restaurant.status,
        created_at=restaurant.created_at
    )

def _customer_to_response(customer) -> CustomerResponse:
    """Convert Customer entity to CustomerResponse"""
    return CustomerResponse(
        customer_id=customer.customer_id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email.value,
        phone_number=customer.phone_number.value,
        created_at=customer.created_at
    )

def _table_to_response(table) -> TableResponse:
    """Convert Table entity to TableResponse"""
    return TableResponse(
        table_id=table.table_id,
        restaurant_id=table.restaurant_id,
        table_number=table.table_number,
        capacity=table.capacity,
        status=table.status,
        created_at=table.created_at
    )

def _hours_to_response(hours) -> OperatingHoursResponse:
    """Convert OperatingHours entity to OperatingHoursResponse"""
    return OperatingHoursResponse(
        hours_id=hours.hours_id,
        restaurant_id=hours.restaurant_id,
        day_of_week=hours.day_of_week,
        open_time=hours.open_time,
        close_time=hours.close_time,
        is_open=hours.is_open,
        is_overnight=hours.is_overnight
    )

def _block_to_response(block) -> AvailabilityBlockResponse:
    """Convert AvailabilityBlock entity to AvailabilityBlockResponse"""
    return AvailabilityBlockResponse(
        block_id=block.block_id,
        restaurant_id=block.restaurant_id,
        table_id=block.table_id,
        start_datetime=block.start_datetime,
        end_datetime=block.end_datetime,
        reason=block.reason,
        block_type=block.block_type
    )

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        customer_id=reservation.customer_id,
        restaurant_id=reservation.restaurant_id,
        table_id=reservation.table_id,
        reservation_datetime=reservation.reservation_datetime,
        end_datetime=reservation.end_datetime,
        party_size=reservation.party_size,
        special_requests=reservation.special_requests,
        status=reservation.status,
        created_at=reservation.created_at
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
