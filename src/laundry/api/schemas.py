"""Pydantic API schemas for the Laundry domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas: orders
# ---------------------------------------------------------------------------
class BagRequest(BaseModel):
    weight: float = Field(default=0.0, ge=0)
    identifier: str | None = None
    color: str | None = None
    description: str | None = None


class CreateOrderRequest(BaseModel):
    customer_id: str
    created_by: str
    order_type: str = "storePickup"
    is_same_day: bool = False
    keep_separated: bool = False
    special_instructions: str | None = None
    manual_delivery_fee: float | None = Field(default=None, ge=0)
    bags: list[BagRequest] = []


class UpdateBagRequest(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    color: str | None = None
    description: str | None = None


class ExtraItemSelection(BaseModel):
    item_id: str
    quantity: float = 1
    override_total: float | None = Field(default=None, ge=0)


class SetExtraItemsRequest(BaseModel):
    items: list[ExtraItemSelection]


class SetSameDayRequest(BaseModel):
    is_same_day: bool


class TransitionRequest(BaseModel):
    target_status: str
    changed_by: str
    notes: str | None = None


class ScanRequest(BaseModel):
    machine_code: str
    scanned_by: str
    bag_identifier: str | None = None


class ActorRequest(BaseModel):
    """Body for steps that only need to know who did them."""

    actor: str
    initials: str | None = None


class VerifyRequest(BaseModel):
    actor: str
    initials: str | None = None
    force_same_person: bool = False


class FinalCheckRequest(VerifyRequest):
    final_weight: float | None = Field(default=None, ge=0)


class RecordPaymentRequest(BaseModel):
    amount: float
    payment_method: str
    received_by: str


class ApplyCreditRequest(BaseModel):
    amount: float | None = None
    applied_by: str


class MarkUnpaidRequest(BaseModel):
    marked_by: str


# ---------------------------------------------------------------------------
# Request schemas: customers, machines and catalog
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    initial_credit: float = Field(default=0.0, ge=0)
    delivery_fee: float | None = Field(default=None, ge=0)


class CreditRequest(BaseModel):
    amount: float
    description: str | None = None
    actor: str | None = None


class DeliveryFeeRequest(BaseModel):
    delivery_fee: float | None = Field(default=None, ge=0)


class RegisterMachineRequest(BaseModel):
    name: str
    machine_type: str
    qr_code: str | None = None


class MaintenanceRequest(BaseModel):
    under_maintenance: bool


class PricingSettingsRequest(BaseModel):
    minimum_weight: float | None = Field(default=None, ge=0)
    minimum_price: float | None = Field(default=None, ge=0)
    price_per_pound: float | None = Field(default=None, ge=0)
    same_day_extra_cents_per_pound: float | None = Field(default=None, ge=0)
    same_day_minimum_charge: float | None = Field(default=None, ge=0)
    updated_by: str | None = None


class ExtraItemRequest(BaseModel):
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    per_weight_unit: float | None = Field(default=None, ge=0)


class UpdateExtraItemRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    per_weight_unit: float | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class CustomerIdResponse(BaseModel):
    customer_id: str


class MachineIdResponse(BaseModel):
    machine_id: str


class ExtraItemIdResponse(BaseModel):
    item_id: str


class BagIdResponse(BaseModel):
    bag_id: str


class StatusResponse(BaseModel):
    status: str


class VerificationResponse(BaseModel):
    """Either the step was applied, or the caller must confirm a same-person check."""

    status: str
    requires_confirmation: bool = False
    message: str | None = None


class ScanResponse(BaseModel):
    machine_id: str
    machine_name: str
    machine_type: str
    requires_bag_selection: bool = False
    bag_identifiers: list[str] = []
    assignment_id: str | None = None
    bag_identifier: str | None = None
    order_status: str | None = None


class PaymentResponse(BaseModel):
    payment_status: str


class CreditBalanceResponse(BaseModel):
    credit: float


class TotalResponse(BaseModel):
    total_amount: float


class BagResponse(BaseModel):
    id: str
    identifier: str
    weight: float
    color: str | None = None
    description: str | None = None
    is_folding_checked: bool = False


class MachineAssignmentResponse(BaseModel):
    id: str
    machine_id: str
    machine_name: str
    machine_type: str
    bag_identifier: str | None = None
    assigned_by: str
    is_checked: bool
    checked_by: str | None = None
    is_active: bool
    unloaded_by: str | None = None
    is_unload_checked: bool = False
    is_folding: bool = False
    is_folded: bool = False


class OrderResponse(BaseModel):
    id: str
    order_number: int
    customer_id: str
    customer_name: str | None = None
    order_type: str
    status: str
    is_same_day: bool
    keep_separated: bool
    bags: list[BagResponse]
    machine_assignments: list[MachineAssignmentResponse]
    subtotal: float
    same_day_fee: float
    extras_total: float
    delivery_fee: float
    total_amount: float
    credit_applied: float
    amount_paid: float
    balance_due: float
    payment_status: str
    is_paid: bool


class CreditEntryResponse(BaseModel):
    amount: float
    entry_type: str
    description: str | None = None
    order_id: str | None = None


class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: str | None = None
    credit: float
    delivery_fee: float | None = None
    credit_history: list[CreditEntryResponse]


class ExtraItemResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float
    per_weight_unit: float | None = None
    is_active: bool = True


class MachineResponse(BaseModel):
    id: str
    name: str
    machine_type: str
    qr_code: str
    status: str
    current_order_id: str | None = None


class PrintResponse(BaseModel):
    printed: int


class ActivityEntryResponse(BaseModel):
    action: str
    performed_by: str | None = None
    description: str
    occurred_at: str


class DailyReportResponse(BaseModel):
    date: str
    orders_created: int = 0
    orders_completed: int = 0
    payments_count: int = 0
    cash_total: float = 0.0
    check_total: float = 0.0
    venmo_total: float = 0.0
    zelle_total: float = 0.0
    credit_applied_total: float = 0.0
    collected_total: float = 0.0
    orders_marked_unpaid: int = 0
    reverted_total: float = 0.0
    credit_refunded_total: float = 0.0
