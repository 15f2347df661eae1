from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q

from profiles.models import ProfileSnapshot
from profiles.services import ProfileStore
from .compatibility import CompatibilityCalculator, CompatibilityResult, RankedCandidate
from .exceptions import DuplicateActionError, NotFoundError, SelfActionError
from .models import Match, UserAction

User = get_user_model()
logger = logging.getLogger(__name__)


def canonical_pair(user_a_id: int, user_b_id: int) -> Tuple[int, int]:
    """Order a pair of user ids so the smaller id comes first"""
    return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


def lock_users(*user_ids: int) -> list:
    """Lock user rows in id order so calls touching the same pair run one at a time"""
    return list(User.objects.select_for_update().filter(id__in=set(user_ids)).order_by('id'))


@dataclass(frozen=True)
class ActionResult:
    success: bool
    message: str
    is_match: bool = False
    match_id: Optional[int] = None


@dataclass(frozen=True)
class MatchEntry:
    match: Match
    counterpart: ProfileSnapshot


@dataclass(frozen=True)
class Comparison:
    profile1: ProfileSnapshot
    profile2: ProfileSnapshot
    result: CompatibilityResult
    details: Dict[str, str]


class MatchRegistry:
    """Keeps exactly one active match per unordered pair of users"""

    def __init__(self, profile_store: Optional[ProfileStore] = None):
        self.profiles = profile_store or ProfileStore()

    def create_match_if_absent(self, user_a_id: int, user_b_id: int) -> Match:
        user1_id, user2_id = canonical_pair(user_a_id, user_b_id)

        with transaction.atomic():
            match = self._locked_active_match(user1_id, user2_id)
            if match:
                return match

            try:
                with transaction.atomic():
                    match = Match.objects.create(user1_id=user1_id, user2_id=user2_id)
            except IntegrityError:
                # Another transaction created the pair first
                return Match.objects.get(user1_id=user1_id, user2_id=user2_id, is_active=True)

        logger.info(f"Match {match.id} created between users {user1_id} and {user2_id}")
        return match

    def _locked_active_match(self, user1_id: int, user2_id: int) -> Optional[Match]:
        return Match.objects.select_for_update().filter(
            user1_id=user1_id,
            user2_id=user2_id,
            is_active=True
        ).first()

    def get_active_match(self, user_a_id: int, user_b_id: int) -> Optional[Match]:
        user1_id, user2_id = canonical_pair(user_a_id, user_b_id)
        return Match.objects.filter(user1_id=user1_id, user2_id=user2_id, is_active=True).first()

    def list_active_matches(self, user_id: int) -> List[MatchEntry]:
        """Active matches for a user with the other member's profile, newest first"""
        matches = list(
            Match.objects.filter(
                Q(user1_id=user_id) | Q(user2_id=user_id),
                is_active=True
            ).order_by('-created_at', '-id')
        )

        counterparts = self.profiles.get_snapshots(match.other_user_id(user_id) for match in matches)

        entries = []
        for match in matches:
            counterpart = counterparts.get(match.other_user_id(user_id))
            if counterpart is None:
                # Counterpart deactivated their account or removed the profile
                continue
            entries.append(MatchEntry(match=match, counterpart=counterpart))
        return entries


class ActionLedger:
    """Records Like/Pass actions once per (actor, target) and detects mutual likes"""

    def __init__(self, profile_store: Optional[ProfileStore] = None,
                 match_registry: Optional[MatchRegistry] = None):
        self.profiles = profile_store or ProfileStore()
        self.matches = match_registry or MatchRegistry(self.profiles)

    def like(self, actor_id: int, target_id: int) -> ActionResult:
        return self.record_action(actor_id, target_id, UserAction.LIKE)

    def pass_(self, actor_id: int, target_id: int) -> ActionResult:
        return self.record_action(actor_id, target_id, UserAction.PASS)

    def record_action(self, actor_id: int, target_id: int, action_type: str) -> ActionResult:
        if action_type not in (UserAction.LIKE, UserAction.PASS):
            raise ValueError(f"Unknown action type: {action_type}")

        if actor_id == target_id:
            raise SelfActionError(f"Cannot {action_type} yourself")

        if not self.profiles.exists(actor_id, target_id):
            raise NotFoundError("One or both users not found")

        with transaction.atomic():
            lock_users(actor_id, target_id)

            existing = self._existing_action(actor_id, target_id)
            if existing:
                raise DuplicateActionError(f"You already {existing.past_tense} this profile")

            try:
                with transaction.atomic():
                    UserAction.objects.create(
                        actor_id=actor_id,
                        target_id=target_id,
                        action_type=action_type
                    )
            except IntegrityError:
                logger.warning(f"Concurrent duplicate action from user {actor_id} to user {target_id}")
                raise DuplicateActionError("You already acted on this profile")

            if action_type == UserAction.PASS:
                return ActionResult(True, "Profile passed successfully")

            mutual_like = UserAction.objects.filter(
                actor_id=target_id,
                target_id=actor_id,
                action_type=UserAction.LIKE
            ).exists()

            if not mutual_like:
                return ActionResult(True, "Profile liked successfully")

            match = self.matches.create_match_if_absent(actor_id, target_id)

        return ActionResult(
            True,
            "It's a match! You both liked each other!",
            is_match=True,
            match_id=match.id
        )

    def _existing_action(self, actor_id: int, target_id: int) -> Optional[UserAction]:
        return UserAction.objects.filter(actor_id=actor_id, target_id=target_id).first()

    def acted_on_ids(self, actor_id: int) -> Set[int]:
        """Users this actor already liked or passed"""
        return set(
            UserAction.objects.filter(actor_id=actor_id).values_list('target_id', flat=True)
        )


class MatchingService:
    """Service for comparing users and discovering roommate candidates"""

    def __init__(self, calculator: Optional[CompatibilityCalculator] = None,
                 profile_store: Optional[ProfileStore] = None):
        self.calculator = calculator or CompatibilityCalculator()
        self.profiles = profile_store or ProfileStore()
        self.matches = MatchRegistry(self.profiles)
        self.ledger = ActionLedger(self.profiles, self.matches)

    def _get_snapshot(self, user_id: int) -> ProfileSnapshot:
        snapshot = self.profiles.get_snapshot(user_id)
        if snapshot is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return snapshot

    def compare_users(self, user_id1: int, user_id2: int) -> Comparison:
        """Compatibility of user2 as seen by user1"""
        profile1 = self._get_snapshot(user_id1)
        profile2 = self._get_snapshot(user_id2)

        result = self.calculator.calculate(profile1, profile2)
        return Comparison(
            profile1=profile1,
            profile2=profile2,
            result=result,
            details=self.calculator.describe(profile1, profile2, result)
        )

    def discover_candidates(self, user_id: int, limit: Optional[int] = None) -> List[RankedCandidate]:
        """Rank every profile the user has not acted on yet"""
        actor = self._get_snapshot(user_id)

        excluded = self.ledger.acted_on_ids(user_id)
        excluded.add(user_id)

        ranked = self.calculator.rank_candidates(actor, self.profiles.candidate_snapshots(exclude_ids=excluded))
        if limit is not None:
            ranked = ranked[:limit]

        logger.debug(f"Ranked {len(ranked)} candidates for user {user_id}")
        return ranked
