from dataclasses import dataclass
from typing import List, Optional
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from profiles.models import ProfileSnapshot
from profiles.services import ProfileStore
from roommate_matching.exceptions import (
    AlreadyRelatedError, DuplicateRequestError, InvalidStateError,
    NotFoundError, SelfRequestError
)
from roommate_matching.services import canonical_pair, lock_users
from .models import RoommateRelationship, RoommateRequest

User = get_user_model()
logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    RoommateRequest.PENDING: (RoommateRequest.MUTUALLY_CONFIRMED, RoommateRequest.REJECTED),
    RoommateRequest.MUTUALLY_CONFIRMED: (RoommateRequest.APPROVED, RoommateRequest.REJECTED),
    RoommateRequest.APPROVED: (),
    RoommateRequest.REJECTED: (),
}


def ensure_transition(current: str, target: str) -> None:
    """Raise InvalidStateError unless a request may move from current to target"""
    if target in ALLOWED_TRANSITIONS.get(current, ()):
        return

    if current in RoommateRequest.TERMINAL_STATUSES:
        raise InvalidStateError("This request has already been processed")
    if target == RoommateRequest.APPROVED:
        raise InvalidStateError("Both users must confirm the request before it can be approved")
    raise InvalidStateError(f"Cannot change request status from {current} to {target}")


@dataclass(frozen=True)
class SendResult:
    request: RoommateRequest
    message: str
    mutually_confirmed: bool = False


@dataclass(frozen=True)
class ApproveResult:
    relationship: RoommateRelationship
    message: str


@dataclass(frozen=True)
class RoommateEntry:
    relationship: RoommateRelationship
    roommate: User
    profile: Optional[ProfileSnapshot] = None


@dataclass(frozen=True)
class UserRequests:
    sent: List[RoommateRequest]
    received: List[RoommateRequest]
    roommates: List[RoommateEntry]


class RoommateRelationshipRegistry:
    """Active roommate relationships, at most one per user"""

    def __init__(self, profile_store: Optional[ProfileStore] = None):
        self.profiles = profile_store or ProfileStore()

    def _active_for(self, user_id: int):
        return RoommateRelationship.objects.filter(
            Q(user1_id=user_id) | Q(user2_id=user_id),
            is_active=True
        )

    def has_active_relationship(self, user_id: int) -> bool:
        return self._active_for(user_id).exists()

    def pair_is_active(self, user_a_id: int, user_b_id: int) -> bool:
        user1_id, user2_id = canonical_pair(user_a_id, user_b_id)
        return RoommateRelationship.objects.filter(
            user1_id=user1_id,
            user2_id=user2_id,
            is_active=True
        ).exists()

    def _entry_for(self, relationship: RoommateRelationship, user_id: int) -> RoommateEntry:
        roommate = relationship.user2 if relationship.user1_id == user_id else relationship.user1
        return RoommateEntry(
            relationship=relationship,
            roommate=roommate,
            profile=self.profiles.get_snapshot(roommate.id)
        )

    def get_active_roommate_of(self, user_id: int) -> Optional[RoommateEntry]:
        """The user's current roommate, or None"""
        relationship = self._active_for(user_id).select_related('user1', 'user2').first()
        if relationship is None:
            return None
        return self._entry_for(relationship, user_id)

    def active_roommates_of(self, user_id: int) -> List[RoommateEntry]:
        relationships = self._active_for(user_id).select_related('user1', 'user2')
        return [self._entry_for(relationship, user_id) for relationship in relationships]

    def list_relationships(self) -> List[RoommateRelationship]:
        return list(
            RoommateRelationship.objects.select_related(
                'user1', 'user2', 'approved_by_admin'
            ).order_by('-created_at', '-id')
        )

    def deactivate(self, relationship_id: int) -> RoommateRelationship:
        """Mark a relationship inactive; already inactive relationships are left alone"""
        with transaction.atomic():
            relationship = RoommateRelationship.objects.select_for_update().select_related(
                'user1', 'user2'
            ).filter(id=relationship_id).first()

            if relationship is None:
                raise NotFoundError("Relationship not found")

            if not relationship.is_active:
                logger.info(f"Relationship {relationship_id} is already inactive")
                return relationship

            relationship.is_active = False
            relationship.deactivated_at = timezone.now()
            relationship.save(update_fields=['is_active', 'deactivated_at'])

        logger.info(
            f"Relationship {relationship_id} between users {relationship.user1_id} "
            f"and {relationship.user2_id} deactivated"
        )
        return relationship


class RoommateRequestWorkflow:
    """Moves roommate requests from pending to mutual confirmation and admin review"""

    def __init__(self, profile_store: Optional[ProfileStore] = None,
                 registry: Optional[RoommateRelationshipRegistry] = None):
        self.profiles = profile_store or ProfileStore()
        self.registry = registry or RoommateRelationshipRegistry(self.profiles)

    def _open_between(self, user_a_id: int, user_b_id: int):
        return RoommateRequest.objects.filter(
            Q(requester_id=user_a_id, target_id=user_b_id) |
            Q(requester_id=user_b_id, target_id=user_a_id),
            status__in=RoommateRequest.OPEN_STATUSES
        )

    def send_request(self, requester_id: int, target_id: int, message: str = '') -> SendResult:
        if requester_id == target_id:
            raise SelfRequestError("Cannot send a roommate request to yourself")

        if not self.profiles.exists(target_id):
            raise NotFoundError("Target user not found")

        with transaction.atomic():
            lock_users(requester_id, target_id)

            open_requests = list(self._open_between(requester_id, target_id).select_for_update())

            if any(request.requester_id == requester_id for request in open_requests):
                raise DuplicateRequestError("You already have a pending request to this user")

            if self.registry.pair_is_active(requester_id, target_id):
                raise AlreadyRelatedError("You already have an active roommate relationship with this user")

            try:
                with transaction.atomic():
                    roommate_request = RoommateRequest.objects.create(
                        requester_id=requester_id,
                        target_id=target_id,
                        message=message or '',
                    )
            except IntegrityError:
                logger.warning(f"Concurrent duplicate roommate request from user {requester_id} to user {target_id}")
                raise DuplicateRequestError("You already have a pending request to this user")

            inverse = next(
                (request for request in open_requests if request.status == RoommateRequest.PENDING),
                None
            )
            if inverse is None:
                logger.info(f"Roommate request {roommate_request.id} sent from user {requester_id} to user {target_id}")
                return SendResult(
                    roommate_request,
                    "Roommate request sent successfully. Waiting for the other user to confirm."
                )

            # Both users have now asked each other
            for request in (inverse, roommate_request):
                ensure_transition(request.status, RoommateRequest.MUTUALLY_CONFIRMED)
                request.status = RoommateRequest.MUTUALLY_CONFIRMED
                request.save(update_fields=['status'])

        logger.info(f"Roommate requests {inverse.id} and {roommate_request.id} mutually confirmed")
        return SendResult(
            roommate_request,
            "Both users have confirmed! Your request is now waiting for admin approval.",
            mutually_confirmed=True
        )

    def approve_request(self, request_id: int, admin_id: int) -> ApproveResult:
        with transaction.atomic():
            roommate_request = RoommateRequest.objects.select_for_update().filter(id=request_id).first()
            if roommate_request is None:
                raise NotFoundError("Request not found")

            ensure_transition(roommate_request.status, RoommateRequest.APPROVED)

            user_ids = [roommate_request.requester_id, roommate_request.target_id]
            users = {user.id: user for user in lock_users(*user_ids)}

            if self.registry.pair_is_active(*user_ids):
                raise AlreadyRelatedError("An active relationship already exists between these users")
            for user_id in user_ids:
                if self.registry.has_active_relationship(user_id):
                    raise AlreadyRelatedError(f"{users[user_id].get_full_name()} already has an active roommate")

            inverse = RoommateRequest.objects.select_for_update().filter(
                requester_id=roommate_request.target_id,
                target_id=roommate_request.requester_id,
                status=RoommateRequest.MUTUALLY_CONFIRMED
            ).first()

            processed_at = timezone.now()
            for request in filter(None, (roommate_request, inverse)):
                ensure_transition(request.status, RoommateRequest.APPROVED)
                request.status = RoommateRequest.APPROVED
                request.processed_by_admin_id = admin_id
                request.processed_at = processed_at
                request.save(update_fields=['status', 'processed_by_admin', 'processed_at'])

            user1_id, user2_id = canonical_pair(*user_ids)
            try:
                with transaction.atomic():
                    relationship = RoommateRelationship.objects.create(
                        user1_id=user1_id,
                        user2_id=user2_id,
                        approved_by_admin_id=admin_id,
                        original_request=roommate_request,
                        created_at=processed_at,
                    )
            except IntegrityError:
                logger.warning(f"Concurrent approval for users {user1_id} and {user2_id}")
                raise AlreadyRelatedError("An active relationship already exists between these users")

        logger.info(f"Roommate request {request_id} approved by admin {admin_id}, relationship {relationship.id}")
        requester = users[roommate_request.requester_id]
        target = users[roommate_request.target_id]
        return ApproveResult(
            relationship,
            f"Roommate relationship approved between {requester.get_full_name()} and {target.get_full_name()}"
        )

    def reject_request(self, request_id: int, admin_id: int) -> RoommateRequest:
        """Reject a request together with any open request in the other direction"""
        with transaction.atomic():
            roommate_request = RoommateRequest.objects.select_for_update().filter(id=request_id).first()
            if roommate_request is None:
                raise NotFoundError("Request not found")

            ensure_transition(roommate_request.status, RoommateRequest.REJECTED)

            inverse = RoommateRequest.objects.select_for_update().filter(
                requester_id=roommate_request.target_id,
                target_id=roommate_request.requester_id,
                status__in=RoommateRequest.OPEN_STATUSES
            ).first()

            processed_at = timezone.now()
            for request in filter(None, (roommate_request, inverse)):
                ensure_transition(request.status, RoommateRequest.REJECTED)
                request.status = RoommateRequest.REJECTED
                request.processed_by_admin_id = admin_id
                request.processed_at = processed_at
                request.save(update_fields=['status', 'processed_by_admin', 'processed_at'])

        logger.info(f"Roommate request {request_id} rejected by admin {admin_id}")
        return roommate_request

    def pending_for_review(self) -> List[RoommateRequest]:
        """Mutually confirmed requests awaiting an admin, one per pair, newest first"""
        requests = RoommateRequest.objects.filter(
            status=RoommateRequest.MUTUALLY_CONFIRMED
        ).select_related('requester', 'target').order_by('-created_at', '-id')

        seen_pairs = set()
        pending = []
        for request in requests:
            pair = canonical_pair(request.requester_id, request.target_id)
            if pair in seen_pairs:
                continue
            seen_pairs.add(pair)
            pending.append(request)
        return pending

    def requests_for_user(self, user_id: int) -> UserRequests:
        sent = RoommateRequest.objects.filter(
            requester_id=user_id
        ).select_related('target').order_by('-created_at', '-id')

        received = RoommateRequest.objects.filter(
            target_id=user_id
        ).select_related('requester').order_by('-created_at', '-id')

        return UserRequests(
            sent=list(sent),
            received=list(received),
            roommates=self.registry.active_roommates_of(user_id)
        )
