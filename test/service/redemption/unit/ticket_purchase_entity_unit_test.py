import re

import pytest

from src.platform.exception.exceptions import DomainError, NotRedeemableError
from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketStatus, TicketType
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
    generate_redemption_code,
)


pytestmark = pytest.mark.unit


def _ticket(ticket_type: TicketType = TicketType.FREE, price: int = 0, quantity: int = 10) -> Ticket:
    ticket = Ticket.create(
        event_id=3, name='General', ticket_type=ticket_type, price=price, quantity=quantity
    )
    ticket.id = 7
    return ticket


class TestTicketCreate:
    def test_new_ticket_starts_with_full_inventory(self):
        ticket = _ticket(quantity=25)

        assert ticket.remaining_quantity == 25
        assert ticket.status == TicketStatus.ACTIVE

    @pytest.mark.parametrize(
        'ticket_type,price,quantity',
        [
            (TicketType.FREE, 0, 0),
            (TicketType.FREE, 100, 10),
            (TicketType.RSVP, 5, 10),
            (TicketType.PAID, 0, 10),
            (TicketType.PAID, -1, 10),
        ],
    )
    def test_invalid_ticket_is_rejected(self, ticket_type, price, quantity):
        with pytest.raises(DomainError):
            Ticket.create(
                event_id=1, name='x', ticket_type=ticket_type, price=price, quantity=quantity
            )

    def test_sold_out_ticket_is_not_purchasable(self):
        ticket = _ticket()
        ticket.status = TicketStatus.SOLD_OUT

        with pytest.raises(DomainError, match='not available'):
            ticket.ensure_purchasable(quantity=1)

    def test_cannot_buy_more_than_remaining(self):
        ticket = _ticket(quantity=2)

        with pytest.raises(DomainError, match='Only 2 tickets remaining'):
            ticket.ensure_purchasable(quantity=3)


class TestTicketPurchaseCreate:
    def test_free_purchase_is_completed_immediately(self):
        purchase = TicketPurchase.create(ticket=_ticket(), purchaser_id=5, quantity=2)

        assert purchase.status == PurchaseStatus.COMPLETED
        assert purchase.total_amount == 0
        assert purchase.is_checked_in is False
        assert purchase.ticket_id == 7
        assert purchase.event_id == 3

    def test_paid_purchase_waits_for_payment(self):
        ticket = _ticket(ticket_type=TicketType.PAID, price=1500)

        purchase = TicketPurchase.create(ticket=ticket, purchaser_id=5, quantity=2)

        assert purchase.status == PurchaseStatus.PENDING
        assert purchase.total_amount == 3000

    def test_redemption_code_format(self):
        code = generate_redemption_code()

        assert re.fullmatch(r'TIX-[A-Z0-9]{8}', code)

    def test_new_redemption_code_keeps_everything_else(self):
        purchase = TicketPurchase.create(ticket=_ticket(), purchaser_id=5, quantity=1)

        regenerated = purchase.with_new_redemption_code()

        assert regenerated.id == purchase.id
        assert regenerated.redemption_code.startswith('TIX-')


class TestEnsureRedeemable:
    @pytest.mark.parametrize(
        'status', [PurchaseStatus.PENDING, PurchaseStatus.CANCELLED, PurchaseStatus.REFUNDED]
    )
    def test_only_completed_purchases_admit(self, status):
        purchase = TicketPurchase.create(ticket=_ticket(), purchaser_id=5, quantity=1)
        purchase.status = status

        with pytest.raises(NotRedeemableError) as exc_info:
            purchase.ensure_redeemable()

        assert exc_info.value.status_code == 422

    def test_wrong_event_is_rejected(self):
        purchase = TicketPurchase.create(ticket=_ticket(), purchaser_id=5, quantity=1)

        with pytest.raises(NotRedeemableError, match='different event'):
            purchase.ensure_redeemable(event_id=99)

    def test_matching_event_passes(self):
        purchase = TicketPurchase.create(ticket=_ticket(), purchaser_id=5, quantity=1)

        purchase.ensure_redeemable(event_id=3)
