"""Tests for the seller verification review queue."""

import pytest

from storefront.services.verification.registry import (
    VerificationNotFoundError,
    VerificationStateError,
)


@pytest.mark.unit
def test_queue_is_ordered_by_priority_then_wait(verification_registry):
    ids = [request.id for request in verification_registry.list_requests()]

    assert ids == ["ver-004", "ver-001", "ver-002", "ver-005", "ver-003", "ver-006"]


@pytest.mark.unit
def test_filter_by_status_and_search(verification_registry):
    submitted = verification_registry.list_requests(status="submitted")
    assert [request.id for request in submitted] == ["ver-004", "ver-001"]

    found = verification_registry.list_requests(query="  talavera ")
    assert [request.id for request in found] == ["ver-005"]


@pytest.mark.unit
def test_stats(verification_registry):
    stats = verification_registry.stats()

    assert stats.total == 6
    assert stats.pending == 2
    assert stats.under_review == 1
    assert stats.info_requested == 1
    assert stats.approved == 1
    assert stats.rejected == 1
    assert stats.urgent == 1


@pytest.mark.unit
def test_approve_defaults_to_requested_level(verification_registry):
    approved = verification_registry.approve("ver-001", "admin@papalote.mx")

    assert approved.status == "approved"
    assert approved.approved_level == "verified_artisan"
    assert approved.reviewed_by == "admin@papalote.mx"
    assert approved.reviewed_at is not None
    assert verification_registry.stats().approved == 2


@pytest.mark.unit
def test_resolved_requests_cannot_be_decided_again(verification_registry):
    with pytest.raises(VerificationStateError):
        verification_registry.reject("ver-005", "admin", "Documentos incompletos")
    with pytest.raises(VerificationNotFoundError):
        verification_registry.get("ver-999")


@pytest.mark.unit
def test_info_requested_can_move_back_under_review(verification_registry):
    updated = verification_registry.start_review("ver-003", "revisor")

    assert updated.status == "under_review"
    assert updated.assigned_to == "revisor"


@pytest.mark.asyncio
async def test_list_endpoint_with_status_filter(client):
    response = await client.get("/admin/verifications", params={"status": "rejected"})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == ["ver-006"]


@pytest.mark.asyncio
async def test_stats_endpoint(client):
    response = await client.get("/admin/verifications/stats")

    assert response.json()["pending"] == 2


@pytest.mark.asyncio
async def test_reject_via_api(client):
    response = await client.post(
        "/admin/verifications/ver-001/reject",
        json={"reviewer": "admin", "reason": "La identificación no es legible"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "rejected"
    assert data["rejection_reason"] == "La identificación no es legible"


@pytest.mark.asyncio
async def test_request_info_via_api(client):
    response = await client.post(
        "/admin/verifications/ver-002/request-info",
        json={"reviewer": "admin", "message": "Sube fotos recientes del taller"},
    )

    assert response.status_code == 200
    assert response.json()["requested_info"] == "Sube fotos recientes del taller"


@pytest.mark.asyncio
async def test_short_rejection_reason_is_invalid(client):
    response = await client.post(
        "/admin/verifications/ver-001/reject",
        json={"reviewer": "admin", "reason": "No"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_decision_on_resolved_request_conflicts(client):
    response = await client.post(
        "/admin/verifications/ver-005/approve", json={"reviewer": "admin"}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_request_returns_404(client):
    response = await client.post(
        "/admin/verifications/ver-999/approve", json={"reviewer": "admin"}
    )
    assert response.status_code == 404

    response = await client.get("/admin/verifications/ver-999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_decision_in_flight_is_rejected(client, redis_client):
    await redis_client.set("inflight:verification:ver-001", "1")

    response = await client.post(
        "/admin/verifications/ver-001/approve",
        json={"reviewer": "admin", "level": "master_artisan"},
    )

    assert response.status_code == 409
