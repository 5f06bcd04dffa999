"""In-memory queue of seller verification requests."""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path
from threading import RLock

from storefront.config import settings
from storefront.models.verification import (
    PRIORITY_ORDER,
    REVIEWABLE_STATUSES,
    VerificationLevel,
    VerificationRequest,
    VerificationStats,
    VerificationStatus,
)

logger = logging.getLogger(__name__)


class VerificationNotFoundError(LookupError):
    def __init__(self, request_id: str):
        super().__init__(f"Solicitud de verificación no encontrada: {request_id}")
        self.request_id = request_id


class VerificationStateError(RuntimeError):
    """Raised when a decision is made on a request that is no longer reviewable."""

    def __init__(self, request_id: str, status: str):
        super().__init__(
            f"La solicitud {request_id} ya fue resuelta (estado: {status})"
        )
        self.request_id = request_id
        self.status = status


class VerificationRegistry:
    """Lock-protected registry of verification requests."""

    def __init__(self, requests: Iterable[VerificationRequest] = ()) -> None:
        self._lock = RLock()
        self._storage: dict[str, VerificationRequest] = {
            request.id: request for request in requests
        }

    def list_requests(
        self,
        status: VerificationStatus | None = None,
        query: str | None = None,
    ) -> list[VerificationRequest]:
        """Requests ordered by priority, then longest waiting first."""

        with self._lock:
            requests = list(self._storage.values())

        if query and query.strip():
            needle = query.strip().lower()
            requests = [
                request
                for request in requests
                if needle in request.seller_name.lower()
                or needle in request.seller_email.lower()
                or needle in request.shop_name.lower()
                or needle in request.id.lower()
            ]
        if status is not None:
            requests = [request for request in requests if request.status == status]

        requests.sort(
            key=lambda request: (PRIORITY_ORDER[request.priority], -request.days_waiting)
        )
        return requests

    def get(self, request_id: str) -> VerificationRequest:
        with self._lock:
            request = self._storage.get(request_id)
        if request is None:
            raise VerificationNotFoundError(request_id)
        return request

    def stats(self) -> VerificationStats:
        with self._lock:
            requests = list(self._storage.values())
        counts = Counter(request.status for request in requests)
        return VerificationStats(
            total=len(requests),
            pending=counts["submitted"],
            under_review=counts["under_review"],
            info_requested=counts["info_requested"],
            approved=counts["approved"],
            rejected=counts["rejected"],
            urgent=sum(
                1 for request in requests if request.priority == "urgent" or request.flagged
            ),
        )

    def _decide(self, request_id: str, **changes) -> VerificationRequest:
        with self._lock:
            request = self.get(request_id)
            if request.status not in REVIEWABLE_STATUSES:
                raise VerificationStateError(request_id, request.status)
            now = datetime.now(UTC)
            updated = request.model_copy(update={**changes, "updated_at": now})
            self._storage[request_id] = updated

        logger.info(
            "[verification-decision]",
            extra={
                "request_id": request_id,
                "seller_id": updated.seller_id,
                "status": updated.status,
                "reviewer": updated.reviewed_by or updated.assigned_to,
            },
        )
        return updated

    def start_review(self, request_id: str, reviewer: str) -> VerificationRequest:
        return self._decide(request_id, status="under_review", assigned_to=reviewer)

    def approve(
        self,
        request_id: str,
        reviewer: str,
        level: VerificationLevel | None = None,
        notes: str | None = None,
    ) -> VerificationRequest:
        """Approve a request, defaulting to the level the seller asked for."""

        request = self.get(request_id)
        return self._decide(
            request_id,
            status="approved",
            approved_level=level or request.requested_level,
            review_notes=notes,
            reviewed_by=reviewer,
            reviewed_at=datetime.now(UTC),
        )

    def reject(self, request_id: str, reviewer: str, reason: str) -> VerificationRequest:
        return self._decide(
            request_id,
            status="rejected",
            rejection_reason=reason,
            reviewed_by=reviewer,
            reviewed_at=datetime.now(UTC),
        )

    def request_info(self, request_id: str, reviewer: str, message: str) -> VerificationRequest:
        return self._decide(
            request_id,
            status="info_requested",
            requested_info=message,
            reviewed_by=reviewer,
            reviewed_at=datetime.now(UTC),
        )


def load_verification_requests(path: str | Path) -> list[VerificationRequest]:
    with Path(path).open(encoding="utf-8") as handle:
        data = json.load(handle)
    return [VerificationRequest.model_validate(item) for item in data]


@lru_cache
def get_verification_registry() -> VerificationRegistry:
    """FastAPI dependency factory."""

    requests = load_verification_requests(settings.VERIFICATIONS_PATH)
    logger.info("Loaded %d verification requests", len(requests))
    return VerificationRegistry(requests)
