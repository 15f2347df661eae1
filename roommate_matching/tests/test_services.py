import pytest

from profiles.tests.utils import create_admin, create_user_with_profile
from roommate_matching.exceptions import DuplicateActionError, NotFoundError, SelfActionError
from roommate_matching import services
from roommate_matching.models import Match, UserAction
from roommate_matching.services import ActionLedger, MatchingService, MatchRegistry


@pytest.mark.django_db
def test_like_without_reciprocal_is_not_a_match() -> None:
    alice = create_user_with_profile('alice@example.com', first_name='Alice')
    bob = create_user_with_profile('bob@example.com', first_name='Bob')

    result = ActionLedger().like(alice.id, bob.id)

    assert result.success
    assert result.message == 'Profile liked successfully'
    assert not result.is_match
    assert result.match_id is None
    assert UserAction.objects.filter(actor=alice, target=bob, action_type=UserAction.LIKE).exists()
    assert not Match.objects.exists()


@pytest.mark.django_db
def test_mutual_like_creates_one_canonical_match() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    ledger = ActionLedger()

    ledger.like(bob.id, alice.id)
    result = ledger.like(alice.id, bob.id)

    assert result.is_match
    assert result.message == "It's a match! You both liked each other!"
    match = Match.objects.get()
    assert result.match_id == match.id
    assert match.user1_id == min(alice.id, bob.id)
    assert match.user2_id == max(alice.id, bob.id)
    assert match.is_active


@pytest.mark.django_db
def test_like_after_pass_is_not_a_match() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    ledger = ActionLedger()

    passed = ledger.pass_(bob.id, alice.id)
    liked = ledger.like(alice.id, bob.id)

    assert passed.message == 'Profile passed successfully'
    assert not liked.is_match
    assert not Match.objects.exists()


@pytest.mark.django_db
def test_self_action_is_checked_first() -> None:
    alice = create_user_with_profile('alice@example.com')

    with pytest.raises(SelfActionError):
        ActionLedger().like(alice.id, alice.id)
    with pytest.raises(SelfActionError):
        ActionLedger().pass_(999999, 999999)
    assert not UserAction.objects.exists()


@pytest.mark.django_db
def test_unknown_target_is_not_found() -> None:
    alice = create_user_with_profile('alice@example.com')

    with pytest.raises(NotFoundError):
        ActionLedger().like(alice.id, 999999)


@pytest.mark.django_db
def test_second_action_on_same_target_is_rejected() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    ledger = ActionLedger()
    ledger.like(alice.id, bob.id)

    with pytest.raises(DuplicateActionError) as excinfo:
        ledger.pass_(alice.id, bob.id)

    assert excinfo.value.message == 'You already liked this profile'
    assert excinfo.value.status_code == 409
    action = UserAction.objects.get(actor=alice, target=bob)
    assert action.action_type == UserAction.LIKE


@pytest.mark.django_db
def test_not_found_is_reported_before_duplicate() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    ActionLedger().like(alice.id, bob.id)
    bob.is_active = False
    bob.save()

    with pytest.raises(NotFoundError):
        ActionLedger().like(alice.id, bob.id)


@pytest.mark.django_db
def test_unknown_action_type_is_rejected() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')

    with pytest.raises(ValueError):
        ActionLedger().record_action(alice.id, bob.id, 'superlike')


@pytest.mark.django_db
def test_create_match_if_absent_is_order_independent() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    registry = MatchRegistry()

    first = registry.create_match_if_absent(bob.id, alice.id)
    second = registry.create_match_if_absent(alice.id, bob.id)

    assert first.id == second.id
    assert Match.objects.filter(is_active=True).count() == 1
    assert registry.get_active_match(alice.id, bob.id).id == first.id


@pytest.mark.django_db
def test_list_active_matches_newest_first_with_counterpart() -> None:
    alice = create_user_with_profile('alice@example.com', first_name='Alice')
    bob = create_user_with_profile('bob@example.com', first_name='Bob')
    carol = create_user_with_profile('carol@example.com', first_name='Carol')
    dave = create_user_with_profile('dave@example.com', first_name='Dave')
    registry = MatchRegistry()

    registry.create_match_if_absent(alice.id, bob.id)
    registry.create_match_if_absent(carol.id, alice.id)
    inactive = registry.create_match_if_absent(alice.id, dave.id)
    inactive.is_active = False
    inactive.save()

    entries = registry.list_active_matches(alice.id)

    assert [entry.counterpart.user_id for entry in entries] == [carol.id, bob.id]
    assert entries[0].counterpart.full_name == 'Carol User'
    assert registry.list_active_matches(dave.id) == []


@pytest.mark.django_db
def test_discover_excludes_self_admins_and_acted_targets() -> None:
    alice = create_user_with_profile('alice@example.com')
    liked = create_user_with_profile('liked@example.com')
    passed = create_user_with_profile('passed@example.com')
    admirer = create_user_with_profile('admirer@example.com')
    fresh = create_user_with_profile('fresh@example.com')
    create_admin(with_profile=True)

    ledger = ActionLedger()
    ledger.like(alice.id, liked.id)
    ledger.pass_(alice.id, passed.id)
    ledger.like(admirer.id, alice.id)

    ranked = MatchingService().discover_candidates(alice.id)

    assert [item.profile.user_id for item in ranked] == [admirer.id, fresh.id]


@pytest.mark.django_db
def test_discover_ranks_by_compatibility_and_applies_limit() -> None:
    alice = create_user_with_profile('alice@example.com', age=21, university='UNSW', lifestyle='quiet')
    distant = create_user_with_profile('distant@example.com', age=35, university='UTS', lifestyle='party', interests='chess')
    close = create_user_with_profile('close@example.com', age=21, university='UNSW', lifestyle='quiet')
    middle = create_user_with_profile('middle@example.com', age=23, university='UNSW', lifestyle='calm')

    service = MatchingService()
    ranked = service.discover_candidates(alice.id)

    assert [item.profile.user_id for item in ranked] == [close.id, middle.id, distant.id]
    assert [item.profile.user_id for item in service.discover_candidates(alice.id, limit=2)] == [close.id, middle.id]


@pytest.mark.django_db
def test_discover_requires_a_profile() -> None:
    admin = create_admin()

    with pytest.raises(NotFoundError):
        MatchingService().discover_candidates(admin.id)


@pytest.mark.django_db
def test_compare_users_returns_breakdown() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com', university='UTS')

    comparison = MatchingService().compare_users(alice.id, bob.id)

    assert comparison.profile2.user_id == bob.id
    assert comparison.result.university_score == 40
    assert comparison.details['university'] == 'Different universities - manageable'


@pytest.mark.django_db
def test_record_action_locks_both_users(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    locked = []
    original_lock_users = services.lock_users

    def recording_lock_users(*user_ids):
        locked.append(set(user_ids))
        return original_lock_users(*user_ids)

    monkeypatch.setattr(services, 'lock_users', recording_lock_users)

    ActionLedger().like(bob.id, alice.id)

    assert locked == [{alice.id, bob.id}]


@pytest.mark.django_db
def test_duplicate_action_that_slips_past_lookup_hits_constraint(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    ledger = ActionLedger()
    ledger.like(alice.id, bob.id)
    monkeypatch.setattr(ActionLedger, '_existing_action', lambda self, actor_id, target_id: None)

    with pytest.raises(DuplicateActionError) as excinfo:
        ledger.pass_(alice.id, bob.id)

    assert excinfo.value.status_code == 409
    assert UserAction.objects.count() == 1
    assert UserAction.objects.get().action_type == UserAction.LIKE


@pytest.mark.django_db
def test_concurrent_match_creation_returns_existing_match(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    registry = MatchRegistry()
    existing = registry.create_match_if_absent(alice.id, bob.id)
    monkeypatch.setattr(MatchRegistry, '_locked_active_match', lambda self, user1_id, user2_id: None)

    match = registry.create_match_if_absent(bob.id, alice.id)

    assert match.id == existing.id
    assert Match.objects.count() == 1
