"""FastAPI routes for the Laundry domain."""

import json

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from protean.utils.globals import current_domain

from laundry.api.schemas import (
    ActivityEntryResponse,
    ActorRequest,
    ApplyCreditRequest,
    BagIdResponse,
    BagRequest,
    BagResponse,
    CreateOrderRequest,
    CreditBalanceResponse,
    CreditEntryResponse,
    CreditRequest,
    CustomerIdResponse,
    CustomerResponse,
    DailyReportResponse,
    DeliveryFeeRequest,
    ExtraItemIdResponse,
    ExtraItemRequest,
    ExtraItemResponse,
    FinalCheckRequest,
    MachineAssignmentResponse,
    MachineIdResponse,
    MachineResponse,
    MaintenanceRequest,
    MarkUnpaidRequest,
    OrderIdResponse,
    OrderResponse,
    PaymentResponse,
    PricingSettingsRequest,
    PrintResponse,
    RecordPaymentRequest,
    RegisterCustomerRequest,
    RegisterMachineRequest,
    ScanRequest,
    ScanResponse,
    SetExtraItemsRequest,
    SetSameDayRequest,
    StatusResponse,
    TotalResponse,
    TransitionRequest,
    UpdateBagRequest,
    UpdateExtraItemRequest,
    VerificationResponse,
    VerifyRequest,
)
from laundry.catalog.extra_item import AddExtraItem, DeactivateExtraItem, ExtraItem, UpdateExtraItem
from laundry.catalog.settings import UpdatePricingSettings, load_settings
from laundry.customer.credit import AddCredit, SetDeliveryFee, UseCredit
from laundry.customer.customer import Customer
from laundry.customer.registration import RegisterCustomer
from laundry.machine.machine import Machine
from laundry.machine.management import RegisterMachine, SetMachineMaintenance
from laundry.order.intake import (
    AddBag,
    CreateOrder,
    RemoveBag,
    SetExtraItems,
    SetManualDeliveryFee,
    SetSameDay,
    UpdateBag,
)
from laundry.order import machines as machine_steps
from laundry.order.machines import (
    CheckDryerUnload,
    MarkDryerFolded,
    StartDryerFolding,
    UnloadDryer,
    scan_machine,
)
from laundry.order.order import Order
from laundry.order.payment import ApplyCreditToOrder, MarkOrderUnpaid, RecordPayment
from laundry.order.receipt import receipt_for
from laundry.order.repricing import RecalculateTotal
from laundry.order.status import TransitionOrderStatus
from laundry.order.steps import (
    CheckBagFolding,
    CheckLayering,
    FinalCheck,
    TransferOrder,
    UncheckBagFolding,
    VerifyFoldingComplete,
    VerifyTransfer,
)
from laundry.printer.jobs import print_bag_labels, print_receipt
from laundry.projections.activity_log import activity_for_order
from laundry.projections.daily_report import report_for


def _verification_response(result, done_status: str) -> VerificationResponse:
    if result.requires_confirmation:
        return VerificationResponse(status="confirmation_required", requires_confirmation=True, message=result.message)
    return VerificationResponse(status=done_status)


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        customer_name=order.customer_name,
        order_type=order.order_type,
        status=order.status,
        is_same_day=order.is_same_day,
        keep_separated=order.keep_separated,
        bags=[
            BagResponse(
                id=str(b.id),
                identifier=b.identifier,
                weight=b.weight or 0.0,
                color=b.color,
                description=b.description,
                is_folding_checked=b.is_folding_checked,
            )
            for b in order.ordered_bags
        ],
        machine_assignments=[
            MachineAssignmentResponse(
                id=str(a.id),
                machine_id=str(a.machine_id),
                machine_name=a.machine_name,
                machine_type=a.machine_type,
                bag_identifier=a.bag_identifier,
                assigned_by=a.assigned_by,
                is_checked=a.is_checked,
                checked_by=a.checked_by,
                is_active=a.is_active,
                unloaded_by=a.unloaded_by,
                is_unload_checked=a.is_unload_checked,
                is_folding=a.is_folding,
                is_folded=a.is_folded,
            )
            for a in sorted(order.machine_assignments or [], key=lambda a: a.assigned_at)
        ],
        subtotal=order.subtotal,
        same_day_fee=order.same_day_fee,
        extras_total=order.extras_total,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        credit_applied=order.credit_applied,
        amount_paid=order.amount_paid,
        balance_due=order.balance_due,
        payment_status=order.payment_status,
        is_paid=order.is_paid,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    """Take in a new order."""
    command = CreateOrder(
        customer_id=body.customer_id,
        order_type=body.order_type,
        is_same_day=body.is_same_day,
        keep_separated=body.keep_separated,
        special_instructions=body.special_instructions,
        manual_delivery_fee=body.manual_delivery_fee,
        bags=json.dumps([bag.model_dump(exclude_none=True) for bag in body.bags]),
        created_by=body.created_by,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.post("/{order_id}/bags", status_code=201, response_model=BagIdResponse)
async def add_bag(order_id: str, body: BagRequest) -> BagIdResponse:
    command = AddBag(
        order_id=order_id,
        weight=body.weight,
        identifier=body.identifier,
        color=body.color,
        description=body.description,
    )
    result = current_domain.process(command, asynchronous=False)
    return BagIdResponse(bag_id=result)


@order_router.put("/{order_id}/bags/{bag_id}", response_model=StatusResponse)
async def update_bag(order_id: str, bag_id: str, body: UpdateBagRequest) -> StatusResponse:
    command = UpdateBag(
        order_id=order_id,
        bag_id=bag_id,
        weight=body.weight,
        color=body.color,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="bag_updated")


@order_router.delete("/{order_id}/bags/{bag_id}", response_model=StatusResponse)
async def remove_bag(order_id: str, bag_id: str) -> StatusResponse:
    current_domain.process(RemoveBag(order_id=order_id, bag_id=bag_id), asynchronous=False)
    return StatusResponse(status="bag_removed")


@order_router.put("/{order_id}/extra-items", response_model=StatusResponse)
async def set_extra_items(order_id: str, body: SetExtraItemsRequest) -> StatusResponse:
    command = SetExtraItems(
        order_id=order_id,
        items=json.dumps([item.model_dump() for item in body.items]),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="extra_items_set")


@order_router.put("/{order_id}/same-day", response_model=StatusResponse)
async def set_same_day(order_id: str, body: SetSameDayRequest) -> StatusResponse:
    current_domain.process(SetSameDay(order_id=order_id, is_same_day=body.is_same_day), asynchronous=False)
    return StatusResponse(status="same_day_set")


@order_router.put("/{order_id}/delivery-fee", response_model=StatusResponse)
async def set_manual_delivery_fee(order_id: str, body: DeliveryFeeRequest) -> StatusResponse:
    """Fee for a delivery order whose customer has no configured fee."""
    command = SetManualDeliveryFee(order_id=order_id, manual_delivery_fee=body.delivery_fee)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="delivery_fee_set")


@order_router.put("/{order_id}/recalculate", response_model=TotalResponse)
async def recalculate_total(order_id: str) -> TotalResponse:
    result = current_domain.process(RecalculateTotal(order_id=order_id), asynchronous=False)
    return TotalResponse(total_amount=result)


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def transition_status(order_id: str, body: TransitionRequest) -> StatusResponse:
    """Move the order to another status."""
    command = TransitionOrderStatus(
        order_id=order_id,
        target_status=body.target_status,
        changed_by=body.changed_by,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


# --- Machines on an order -------------------------------------------------
@order_router.post("/{order_id}/scan", response_model=ScanResponse)
async def scan(order_id: str, body: ScanRequest) -> ScanResponse:
    """Assign the scanned machine, or ask which bag went in."""
    result = scan_machine(order_id, body.machine_code, body.scanned_by, body.bag_identifier)
    if result.requires_bag_selection:
        return ScanResponse(
            machine_id=result.machine_id,
            machine_name=result.machine_name,
            machine_type=result.machine_type,
            requires_bag_selection=True,
            bag_identifiers=list(result.bag_identifiers),
        )
    return ScanResponse(
        machine_id=result.machine_id,
        machine_name=result.machine_name,
        machine_type=result.machine_type,
        assignment_id=result.assignment_id,
        bag_identifier=result.bag_identifier,
        order_status=result.order_status,
    )


@order_router.put("/{order_id}/machines/{machine_id}/check", response_model=VerificationResponse)
async def check_machine(order_id: str, machine_id: str, body: VerifyRequest) -> VerificationResponse:
    result = machine_steps.check_machine(
        order_id,
        machine_id,
        body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
    )
    return _verification_response(result, "machine_checked")


@order_router.put("/{order_id}/machines/{machine_id}/uncheck", response_model=StatusResponse)
async def uncheck_machine(order_id: str, machine_id: str, body: ActorRequest) -> StatusResponse:
    machine_steps.uncheck_machine(order_id, machine_id, body.actor)
    return StatusResponse(status="machine_unchecked")


@order_router.put("/{order_id}/machines/{machine_id}/release", response_model=StatusResponse)
async def release_machine(order_id: str, machine_id: str, body: ActorRequest) -> StatusResponse:
    machine_steps.release_machine(order_id, machine_id, body.actor)
    return StatusResponse(status="machine_released")


@order_router.put("/{order_id}/machines/{machine_id}/unload", response_model=StatusResponse)
async def unload_dryer(order_id: str, machine_id: str, body: ActorRequest) -> StatusResponse:
    command = UnloadDryer(order_id=order_id, machine_id=machine_id, unloaded_by=body.actor, initials=body.initials)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="dryer_unloaded")


@order_router.put("/{order_id}/machines/{machine_id}/unload-check", response_model=VerificationResponse)
async def check_dryer_unload(order_id: str, machine_id: str, body: VerifyRequest) -> VerificationResponse:
    command = CheckDryerUnload(
        order_id=order_id,
        machine_id=machine_id,
        checked_by=body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
    )
    result = current_domain.process(command, asynchronous=False)
    return _verification_response(result, "dryer_unload_checked")


@order_router.put("/{order_id}/machines/{machine_id}/folding/start", response_model=StatusResponse)
async def start_dryer_folding(order_id: str, machine_id: str, body: ActorRequest) -> StatusResponse:
    command = StartDryerFolding(order_id=order_id, machine_id=machine_id, started_by=body.actor, initials=body.initials)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="dryer_folding_started")


@order_router.put("/{order_id}/machines/{machine_id}/folding/complete", response_model=StatusResponse)
async def mark_dryer_folded(order_id: str, machine_id: str, body: ActorRequest) -> StatusResponse:
    command = MarkDryerFolded(order_id=order_id, machine_id=machine_id, folded_by=body.actor, initials=body.initials)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="dryer_folded")


# --- Order-level steps ----------------------------------------------------
@order_router.put("/{order_id}/transfer", response_model=StatusResponse)
async def transfer_order(order_id: str, body: ActorRequest) -> StatusResponse:
    command = TransferOrder(order_id=order_id, transferred_by=body.actor, initials=body.initials)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="transferred")


@order_router.put("/{order_id}/transfer/verify", response_model=VerificationResponse)
async def verify_transfer(order_id: str, body: VerifyRequest) -> VerificationResponse:
    command = VerifyTransfer(
        order_id=order_id,
        verified_by=body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
    )
    result = current_domain.process(command, asynchronous=False)
    return _verification_response(result, "transfer_checked")


@order_router.put("/{order_id}/layering/check", response_model=VerificationResponse)
async def check_layering(order_id: str, body: VerifyRequest) -> VerificationResponse:
    command = CheckLayering(
        order_id=order_id,
        checked_by=body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
    )
    result = current_domain.process(command, asynchronous=False)
    return _verification_response(result, "layering_checked")


@order_router.put("/{order_id}/folding/verify", response_model=VerificationResponse)
async def verify_folding_complete(order_id: str, body: VerifyRequest) -> VerificationResponse:
    command = VerifyFoldingComplete(
        order_id=order_id,
        checked_by=body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
    )
    result = current_domain.process(command, asynchronous=False)
    return _verification_response(result, "folding_verified")


@order_router.put("/{order_id}/final-check", response_model=VerificationResponse)
async def final_check(order_id: str, body: FinalCheckRequest) -> VerificationResponse:
    command = FinalCheck(
        order_id=order_id,
        checked_by=body.actor,
        initials=body.initials,
        force_same_person=body.force_same_person,
        final_weight=body.final_weight,
    )
    result = current_domain.process(command, asynchronous=False)
    return _verification_response(result, "final_checked")


@order_router.put("/{order_id}/bags/{bag_identifier}/folding-check", response_model=StatusResponse)
async def check_bag_folding(order_id: str, bag_identifier: str, body: ActorRequest) -> StatusResponse:
    command = CheckBagFolding(
        order_id=order_id,
        bag_identifier=bag_identifier,
        checked_by=body.actor,
        initials=body.initials,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="bag_folding_checked")


@order_router.delete("/{order_id}/bags/{bag_identifier}/folding-check", response_model=StatusResponse)
async def uncheck_bag_folding(order_id: str, bag_identifier: str, actor: str) -> StatusResponse:
    command = UncheckBagFolding(order_id=order_id, bag_identifier=bag_identifier, unchecked_by=actor)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="bag_folding_unchecked")


# --- Payment --------------------------------------------------------------
@order_router.post("/{order_id}/payments", response_model=PaymentResponse)
async def record_payment(order_id: str, body: RecordPaymentRequest) -> PaymentResponse:
    command = RecordPayment(
        order_id=order_id,
        amount=body.amount,
        payment_method=body.payment_method,
        received_by=body.received_by,
    )
    result = current_domain.process(command, asynchronous=False)
    return PaymentResponse(payment_status=result)


@order_router.post("/{order_id}/credit", response_model=PaymentResponse)
async def apply_credit(order_id: str, body: ApplyCreditRequest) -> PaymentResponse:
    command = ApplyCreditToOrder(order_id=order_id, amount=body.amount, applied_by=body.applied_by)
    result = current_domain.process(command, asynchronous=False)
    return PaymentResponse(payment_status=result)


@order_router.put("/{order_id}/mark-unpaid", response_model=PaymentResponse)
async def mark_unpaid(order_id: str, body: MarkUnpaidRequest) -> PaymentResponse:
    current_domain.process(MarkOrderUnpaid(order_id=order_id, marked_by=body.marked_by), asynchronous=False)
    return PaymentResponse(payment_status="pending")


# --- Activity ------------------------------------------------------------
@order_router.get("/{order_id}/activity", response_model=list[ActivityEntryResponse])
async def get_order_activity(order_id: str) -> list[ActivityEntryResponse]:
    current_domain.repository_for(Order).get(order_id)
    return [
        ActivityEntryResponse(
            action=entry.action,
            performed_by=entry.performed_by,
            description=entry.description,
            occurred_at=entry.occurred_at.isoformat(),
        )
        for entry in activity_for_order(order_id)
    ]


# --- Printing -------------------------------------------------------------
@order_router.get("/{order_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(order_id: str, store_copy: bool = False) -> str:
    return receipt_for(order_id, store_copy=store_copy)


@order_router.post("/{order_id}/print", response_model=PrintResponse)
async def print_order_receipt(order_id: str, store_copy: bool = False) -> PrintResponse:
    """Print the receipt. A printer failure is reported, never raised."""
    return PrintResponse(printed=int(print_receipt(order_id, store_copy=store_copy)))


@order_router.post("/{order_id}/print-labels", response_model=PrintResponse)
async def print_order_labels(order_id: str) -> PrintResponse:
    return PrintResponse(printed=print_bag_labels(order_id))


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=CustomerIdResponse)
async def register_customer(body: RegisterCustomerRequest) -> CustomerIdResponse:
    command = RegisterCustomer(
        name=body.name,
        phone=body.phone,
        email=body.email,
        address=body.address,
        initial_credit=body.initial_credit,
        delivery_fee=body.delivery_fee,
    )
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


@customer_router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str) -> CustomerResponse:
    customer = current_domain.repository_for(Customer).get(customer_id)
    return CustomerResponse(
        id=str(customer.id),
        name=customer.name,
        phone=customer.phone,
        credit=customer.credit,
        delivery_fee=customer.delivery_fee,
        credit_history=[
            CreditEntryResponse(
                amount=e.amount,
                entry_type=e.entry_type,
                description=e.description,
                order_id=str(e.order_id) if e.order_id else None,
            )
            for e in customer.ledger
        ],
    )


@customer_router.post("/{customer_id}/credit", response_model=CreditBalanceResponse)
async def add_credit(customer_id: str, body: CreditRequest) -> CreditBalanceResponse:
    command = AddCredit(
        customer_id=customer_id,
        amount=body.amount,
        description=body.description,
        added_by=body.actor,
    )
    result = current_domain.process(command, asynchronous=False)
    return CreditBalanceResponse(credit=result)


@customer_router.post("/{customer_id}/credit/use", response_model=CreditBalanceResponse)
async def use_credit(customer_id: str, body: CreditRequest) -> CreditBalanceResponse:
    command = UseCredit(
        customer_id=customer_id,
        amount=body.amount,
        description=body.description,
        used_by=body.actor,
    )
    result = current_domain.process(command, asynchronous=False)
    return CreditBalanceResponse(credit=result)


@customer_router.put("/{customer_id}/delivery-fee", response_model=StatusResponse)
async def set_delivery_fee(customer_id: str, body: DeliveryFeeRequest) -> StatusResponse:
    command = SetDeliveryFee(customer_id=customer_id, delivery_fee=body.delivery_fee)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="delivery_fee_set")


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------
machine_router = APIRouter(prefix="/machines", tags=["machines"])


@machine_router.post("", status_code=201, response_model=MachineIdResponse)
async def register_machine(body: RegisterMachineRequest) -> MachineIdResponse:
    command = RegisterMachine(name=body.name, machine_type=body.machine_type, qr_code=body.qr_code)
    result = current_domain.process(command, asynchronous=False)
    return MachineIdResponse(machine_id=result)


@machine_router.get("", response_model=list[MachineResponse])
async def list_machines() -> list[MachineResponse]:
    machines = current_domain.repository_for(Machine)._dao.query.all().items
    return [
        MachineResponse(
            id=str(m.id),
            name=m.name,
            machine_type=m.machine_type,
            qr_code=m.qr_code,
            status=m.status,
            current_order_id=str(m.current_order_id) if m.current_order_id else None,
        )
        for m in sorted(machines, key=lambda m: m.name)
    ]


@machine_router.put("/{machine_id}/maintenance", response_model=StatusResponse)
async def set_maintenance(machine_id: str, body: MaintenanceRequest) -> StatusResponse:
    command = SetMachineMaintenance(machine_id=machine_id, under_maintenance=body.under_maintenance)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="maintenance" if body.under_maintenance else "available")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
catalog_router = APIRouter(prefix="/catalog", tags=["catalog"])


@catalog_router.get("/pricing-settings", response_model=PricingSettingsRequest)
async def get_pricing_settings() -> PricingSettingsRequest:
    settings = load_settings()
    return PricingSettingsRequest(
        minimum_weight=settings.minimum_weight,
        minimum_price=settings.minimum_price,
        price_per_pound=settings.price_per_pound,
        same_day_extra_cents_per_pound=settings.same_day_extra_cents_per_pound,
        same_day_minimum_charge=settings.same_day_minimum_charge,
        updated_by=settings.updated_by,
    )


@catalog_router.put("/pricing-settings", response_model=StatusResponse)
async def update_pricing_settings(body: PricingSettingsRequest) -> StatusResponse:
    current_domain.process(UpdatePricingSettings(**body.model_dump()), asynchronous=False)
    return StatusResponse(status="pricing_updated")


@catalog_router.post("/extra-items", status_code=201, response_model=ExtraItemIdResponse)
async def add_extra_item(body: ExtraItemRequest) -> ExtraItemIdResponse:
    result = current_domain.process(AddExtraItem(**body.model_dump()), asynchronous=False)
    return ExtraItemIdResponse(item_id=result)


@catalog_router.get("/extra-items", response_model=list[ExtraItemResponse])
async def list_extra_items() -> list[ExtraItemResponse]:
    items = current_domain.repository_for(ExtraItem)._dao.query.filter(is_active=True).all().items
    return [
        ExtraItemResponse(
            id=str(i.id),
            name=i.name,
            description=i.description,
            price=i.price,
            per_weight_unit=i.per_weight_unit,
            is_active=i.is_active,
        )
        for i in items
    ]


@catalog_router.put("/extra-items/{item_id}", response_model=StatusResponse)
async def update_extra_item(item_id: str, body: UpdateExtraItemRequest) -> StatusResponse:
    current_domain.process(UpdateExtraItem(item_id=item_id, **body.model_dump()), asynchronous=False)
    return StatusResponse(status="extra_item_updated")


@catalog_router.delete("/extra-items/{item_id}", response_model=StatusResponse)
async def deactivate_extra_item(item_id: str) -> StatusResponse:
    current_domain.process(DeactivateExtraItem(item_id=item_id), asynchronous=False)
    return StatusResponse(status="extra_item_deactivated")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"])


@report_router.get("/daily/{date}", response_model=DailyReportResponse)
async def daily_report(date: str) -> DailyReportResponse:
    record = report_for(date)
    return DailyReportResponse(
        date=record.date,
        orders_created=record.orders_created or 0,
        orders_completed=record.orders_completed or 0,
        payments_count=record.payments_count or 0,
        cash_total=record.cash_total or 0.0,
        check_total=record.check_total or 0.0,
        venmo_total=record.venmo_total or 0.0,
        zelle_total=record.zelle_total or 0.0,
        credit_applied_total=record.credit_applied_total or 0.0,
        collected_total=record.collected_total or 0.0,
        orders_marked_unpaid=record.orders_marked_unpaid or 0,
        reverted_total=record.reverted_total or 0.0,
        credit_refunded_total=record.credit_refunded_total or 0.0,
    )
