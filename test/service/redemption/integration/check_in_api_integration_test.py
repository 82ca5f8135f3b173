"""
Check-in HTTP API

Test Coverage:
1. POST /api/check-in status mapping: 200 / 409 / 404 / 422 / 400
2. Authentication (Bearer header or cookie) and role checks: 401 / 403
3. Verify and history reads
4. Purchase flow over HTTP: create -> complete -> check in
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.platform.config.core_setting import settings
from src.service.redemption.domain.entity.ticket_entity import TicketType


pytestmark = pytest.mark.integration


class TestCheckInEndpoint:
    @pytest.mark.asyncio
    async def test_first_scan_checks_in(self, api_client, auth_headers, volunteer, seed_purchase):
        purchase = await seed_purchase()

        response = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code},
            headers=auth_headers(volunteer),
        )

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['status'] == 'checked_in'
        assert body['wasOfflineSync'] is False
        assert body['ticketPurchase']['redemption_code'] == purchase.redemption_code
        assert body['ticketPurchase']['is_checked_in'] is True
        assert body['ticketPurchase']['id'] == str(purchase.id)

    @pytest.mark.asyncio
    async def test_second_scan_conflicts_with_existing_check_in(
        self, api_client, auth_headers, volunteer, organizer, seed_purchase
    ):
        purchase = await seed_purchase()
        first = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code},
            headers=auth_headers(volunteer),
        )

        second = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code},
            headers=auth_headers(organizer),
        )

        assert second.status_code == 409
        body = second.json()
        assert body['error'] == 'This ticket has already been used for entry'
        first_time = datetime.fromisoformat(first.json()['ticketPurchase']['check_in_time'])
        assert datetime.fromisoformat(body['existingCheckIn']['timestamp']) == first_time

    @pytest.mark.asyncio
    async def test_replayed_offline_scan(
        self, api_client, auth_headers, volunteer, seed_purchase
    ):
        purchase = await seed_purchase()
        captured_at = datetime.now(timezone.utc) - timedelta(minutes=5)

        response = await api_client.post(
            '/api/check-in',
            json={
                'ticketId': purchase.redemption_code,
                'offlineTimestamp': captured_at.isoformat(),
                'userId': volunteer.id,
            },
            headers=auth_headers(volunteer),
        )

        assert response.status_code == 200
        assert response.json()['wasOfflineSync'] is True

    @pytest.mark.asyncio
    async def test_unknown_code(self, api_client, auth_headers, volunteer):
        response = await api_client.post(
            '/api/check-in', json={'ticketId': 'TIX-UNKNOWN1'}, headers=auth_headers(volunteer)
        )

        assert response.status_code == 404
        assert response.json() == {'error': 'Ticket not found'}

    @pytest.mark.asyncio
    async def test_unpaid_purchase_is_not_redeemable(
        self, api_client, auth_headers, volunteer, seed_purchase
    ):
        purchase = await seed_purchase(ticket_type=TicketType.PAID)

        response = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code},
            headers=auth_headers(volunteer),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_wrong_event_is_not_redeemable(
        self, api_client, auth_headers, volunteer, seed_purchase
    ):
        purchase = await seed_purchase()

        response = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code, 'eventId': purchase.event_id + 1},
            headers=auth_headers(volunteer),
        )

        assert response.status_code == 422
        assert response.json() == {
            'error': f'Ticket {purchase.redemption_code} is for a different event '
            f'(event {purchase.event_id})'
        }

    @pytest.mark.asyncio
    async def test_missing_code(self, api_client, auth_headers, volunteer):
        response = await api_client.post(
            '/api/check-in', json={}, headers=auth_headers(volunteer)
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'Missing ticket ID'}


class TestCheckInAuth:
    @pytest.mark.asyncio
    async def test_anonymous_request_is_rejected(self, api_client):
        response = await api_client.post('/api/check-in', json={'ticketId': 'TIX-ANY00000'})

        assert response.status_code == 401
        assert response.json() == {'error': 'Not authenticated'}

    @pytest.mark.asyncio
    async def test_garbage_token_is_rejected(self, api_client):
        response = await api_client.post(
            '/api/check-in',
            json={'ticketId': 'TIX-ANY00000'},
            headers={'Authorization': 'Bearer not-a-jwt'},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_participant_cannot_check_in(self, api_client, auth_headers, participant):
        response = await api_client.post(
            '/api/check-in', json={'ticketId': 'TIX-ANY00000'}, headers=auth_headers(participant)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_cookie_token_is_accepted(self, api_client, jwt_auth, volunteer, seed_purchase):
        purchase = await seed_purchase()
        token = jwt_auth.create_jwt_token(volunteer)

        response = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase.redemption_code},
            headers={'Cookie': f'{settings.AUTH_COOKIE_NAME}={token}'},
        )

        assert response.status_code == 200


class TestCheckInReads:
    @pytest.mark.asyncio
    async def test_verify_does_not_check_in(
        self, api_client, auth_headers, volunteer, seed_purchase
    ):
        purchase = await seed_purchase()

        response = await api_client.get(
            f'/api/check-in/{purchase.redemption_code}', headers=auth_headers(volunteer)
        )

        assert response.status_code == 200
        assert response.json()['is_checked_in'] is False

    @pytest.mark.asyncio
    async def test_history_lists_check_in_and_conflict(
        self, api_client, auth_headers, volunteer, organizer, seed_purchase
    ):
        purchase = await seed_purchase()
        for _ in range(2):
            await api_client.post(
                '/api/check-in',
                json={'ticketId': purchase.redemption_code},
                headers=auth_headers(volunteer),
            )

        response = await api_client.get(
            f'/api/check-in/{purchase.redemption_code}/history', headers=auth_headers(organizer)
        )

        assert response.status_code == 200
        assert [entry['action'] for entry in response.json()] == [
            'check_in',
            'check_in_conflict',
        ]

    @pytest.mark.asyncio
    async def test_history_is_for_organizers_only(
        self, api_client, auth_headers, volunteer, seed_purchase
    ):
        purchase = await seed_purchase()

        response = await api_client.get(
            f'/api/check-in/{purchase.redemption_code}/history', headers=auth_headers(volunteer)
        )

        assert response.status_code == 403


class TestPurchaseFlowOverHttp:
    @pytest.mark.asyncio
    async def test_paid_ticket_is_redeemable_only_after_completion(
        self, api_client, auth_headers, organizer, participant, volunteer
    ):
        # Given: an organizer publishes a paid ticket with two seats
        created = await api_client.post(
            '/api/ticket',
            json={'event_id': 3, 'name': 'VIP', 'ticket_type': 'paid', 'price': 2500, 'quantity': 2},
            headers=auth_headers(organizer),
        )
        assert created.status_code == 201
        ticket_id = created.json()['id']

        # When: a participant buys one
        bought = await api_client.post(
            '/api/ticket-purchase',
            json={'ticket_id': ticket_id, 'quantity': 1},
            headers=auth_headers(participant),
        )
        assert bought.status_code == 201
        purchase = bought.json()
        assert purchase['status'] == 'pending'

        # Then: the gate refuses it until payment completes
        refused = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase['redemption_code']},
            headers=auth_headers(volunteer),
        )
        assert refused.status_code == 422

        completed = await api_client.post(
            f'/api/ticket-purchase/{purchase["id"]}/complete', headers=auth_headers(participant)
        )
        assert completed.status_code == 200
        assert completed.json()['status'] == 'completed'

        admitted = await api_client.post(
            '/api/check-in',
            json={'ticketId': purchase['redemption_code']},
            headers=auth_headers(volunteer),
        )
        assert admitted.status_code == 200

    @pytest.mark.asyncio
    async def test_reconciliation_issues_require_superadmin(
        self, api_client, auth_headers, organizer, superadmin
    ):
        forbidden = await api_client.get(
            '/api/ticket-purchase/reconciliation-issues', headers=auth_headers(organizer)
        )
        allowed = await api_client.get(
            '/api/ticket-purchase/reconciliation-issues', headers=auth_headers(superadmin)
        )

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json() == []
