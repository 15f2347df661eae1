import pytest

from profiles.tests.utils import create_admin, create_user_with_profile
from roommate_matching.exceptions import (
    AlreadyRelatedError, DuplicateRequestError, InvalidStateError,
    NotFoundError, SelfRequestError
)
from roommates import services
from roommates.models import RoommateRelationship, RoommateRequest
from roommates.services import (
    RoommateRelationshipRegistry, RoommateRequestWorkflow, ensure_transition
)


def _mutual_pair(workflow, first, second):
    workflow.send_request(first.id, second.id, 'Want to share a flat?')
    return workflow.send_request(second.id, first.id).request


@pytest.mark.parametrize('current, target', [
    (RoommateRequest.PENDING, RoommateRequest.MUTUALLY_CONFIRMED),
    (RoommateRequest.PENDING, RoommateRequest.REJECTED),
    (RoommateRequest.MUTUALLY_CONFIRMED, RoommateRequest.APPROVED),
    (RoommateRequest.MUTUALLY_CONFIRMED, RoommateRequest.REJECTED),
])
def test_allowed_transitions(current, target) -> None:
    ensure_transition(current, target)


@pytest.mark.parametrize('current, target', [
    (RoommateRequest.PENDING, RoommateRequest.APPROVED),
    (RoommateRequest.APPROVED, RoommateRequest.REJECTED),
    (RoommateRequest.REJECTED, RoommateRequest.APPROVED),
    (RoommateRequest.REJECTED, RoommateRequest.MUTUALLY_CONFIRMED),
    (RoommateRequest.MUTUALLY_CONFIRMED, RoommateRequest.PENDING),
])
def test_forbidden_transitions(current, target) -> None:
    with pytest.raises(InvalidStateError):
        ensure_transition(current, target)


@pytest.mark.django_db
def test_send_request_stays_pending_until_confirmed() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')

    result = RoommateRequestWorkflow().send_request(alice.id, bob.id, 'Hi!')

    assert not result.mutually_confirmed
    assert result.request.status == RoommateRequest.PENDING
    assert result.request.message == 'Hi!'
    assert result.message == 'Roommate request sent successfully. Waiting for the other user to confirm.'


@pytest.mark.django_db
def test_inverse_request_confirms_both() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    workflow = RoommateRequestWorkflow()

    first = workflow.send_request(alice.id, bob.id).request
    result = workflow.send_request(bob.id, alice.id)

    first.refresh_from_db()
    assert result.mutually_confirmed
    assert result.message == 'Both users have confirmed! Your request is now waiting for admin approval.'
    assert first.status == RoommateRequest.MUTUALLY_CONFIRMED
    assert result.request.status == RoommateRequest.MUTUALLY_CONFIRMED


@pytest.mark.django_db
def test_send_request_error_order() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    workflow = RoommateRequestWorkflow()

    with pytest.raises(SelfRequestError):
        workflow.send_request(alice.id, alice.id)
    with pytest.raises(NotFoundError):
        workflow.send_request(alice.id, 999999)

    workflow.send_request(alice.id, bob.id)
    with pytest.raises(DuplicateRequestError):
        workflow.send_request(alice.id, bob.id)

    assert RoommateRequest.objects.count() == 1


@pytest.mark.django_db
def test_send_request_to_current_roommate_is_already_related() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    workflow.approve_request(_mutual_pair(workflow, alice, bob).id, admin.id)

    with pytest.raises(AlreadyRelatedError):
        workflow.send_request(alice.id, bob.id)


@pytest.mark.django_db
def test_approve_requires_mutual_confirmation() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    pending = workflow.send_request(alice.id, bob.id).request

    with pytest.raises(InvalidStateError):
        workflow.approve_request(pending.id, admin.id)
    with pytest.raises(NotFoundError):
        workflow.approve_request(999999, admin.id)

    assert not RoommateRelationship.objects.exists()


@pytest.mark.django_db
def test_approve_creates_relationship_and_closes_both_requests() -> None:
    alice = create_user_with_profile('alice@example.com', first_name='Alice')
    bob = create_user_with_profile('bob@example.com', first_name='Bob')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    confirmed = _mutual_pair(workflow, alice, bob)

    result = workflow.approve_request(confirmed.id, admin.id)

    relationship = result.relationship
    assert result.message == 'Roommate relationship approved between Bob User and Alice User'
    assert relationship.user1_id == min(alice.id, bob.id)
    assert relationship.user2_id == max(alice.id, bob.id)
    assert relationship.approved_by_admin_id == admin.id
    assert relationship.original_request_id == confirmed.id
    assert relationship.is_active

    requests = list(RoommateRequest.objects.all())
    assert {r.status for r in requests} == {RoommateRequest.APPROVED}
    assert {r.processed_by_admin_id for r in requests} == {admin.id}
    assert len({r.processed_at for r in requests}) == 1
    assert workflow.pending_for_review() == []

    with pytest.raises(InvalidStateError):
        workflow.approve_request(confirmed.id, admin.id)


@pytest.mark.django_db
def test_user_with_roommate_cannot_be_approved_again() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    carol = create_user_with_profile('carol@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    workflow.approve_request(_mutual_pair(workflow, alice, bob).id, admin.id)
    second = _mutual_pair(workflow, alice, carol)

    with pytest.raises(AlreadyRelatedError):
        workflow.approve_request(second.id, admin.id)

    second.refresh_from_db()
    assert second.status == RoommateRequest.MUTUALLY_CONFIRMED
    assert RoommateRelationship.objects.filter(is_active=True).count() == 1


@pytest.mark.django_db
def test_reject_closes_both_directions() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    confirmed = _mutual_pair(workflow, alice, bob)

    workflow.reject_request(confirmed.id, admin.id)

    requests = list(RoommateRequest.objects.all())
    assert len(requests) == 2
    assert {r.status for r in requests} == {RoommateRequest.REJECTED}
    assert {r.processed_by_admin_id for r in requests} == {admin.id}
    assert not RoommateRelationship.objects.exists()

    with pytest.raises(InvalidStateError):
        workflow.reject_request(confirmed.id, admin.id)
    with pytest.raises(NotFoundError):
        workflow.reject_request(999999, admin.id)


@pytest.mark.django_db
def test_rejected_pair_can_request_again() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    pending = workflow.send_request(alice.id, bob.id).request

    workflow.reject_request(pending.id, admin.id)
    result = workflow.send_request(alice.id, bob.id)

    assert result.request.status == RoommateRequest.PENDING
    assert RoommateRequest.objects.filter(requester=alice, target=bob).count() == 2


@pytest.mark.django_db
def test_pending_for_review_lists_each_pair_once() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    carol = create_user_with_profile('carol@example.com')
    dave = create_user_with_profile('dave@example.com')
    workflow = RoommateRequestWorkflow()
    _mutual_pair(workflow, alice, bob)
    newest = _mutual_pair(workflow, carol, dave)
    workflow.send_request(alice.id, carol.id)

    pending = workflow.pending_for_review()

    assert [r.id for r in pending] == [newest.id, pending[1].id]
    assert {pending[1].requester_id, pending[1].target_id} == {alice.id, bob.id}


@pytest.mark.django_db
def test_requests_for_user() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    carol = create_user_with_profile('carol@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    workflow.send_request(alice.id, carol.id)
    workflow.send_request(bob.id, alice.id)
    workflow.approve_request(workflow.send_request(alice.id, bob.id).request.id, admin.id)

    summary = workflow.requests_for_user(alice.id)

    assert [r.target_id for r in summary.sent] == [bob.id, carol.id]
    assert [r.requester_id for r in summary.received] == [bob.id]
    assert [entry.roommate.id for entry in summary.roommates] == [bob.id]


@pytest.mark.django_db
def test_get_active_roommate_of() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com', university='UTS')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    relationship = workflow.approve_request(_mutual_pair(workflow, alice, bob).id, admin.id).relationship
    registry = RoommateRelationshipRegistry()

    entry = registry.get_active_roommate_of(alice.id)

    assert entry.relationship.id == relationship.id
    assert entry.roommate.id == bob.id
    assert entry.profile.university == 'UTS'
    assert registry.get_active_roommate_of(bob.id).roommate.id == alice.id
    assert registry.get_active_roommate_of(admin.id) is None


@pytest.mark.django_db
def test_deactivate_is_idempotent_and_frees_users() -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    carol = create_user_with_profile('carol@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    relationship = workflow.approve_request(_mutual_pair(workflow, alice, bob).id, admin.id).relationship
    registry = RoommateRelationshipRegistry()

    deactivated = registry.deactivate(relationship.id)
    again = registry.deactivate(relationship.id)

    assert not deactivated.is_active
    assert deactivated.deactivated_at is not None
    assert again.deactivated_at == deactivated.deactivated_at
    assert registry.get_active_roommate_of(alice.id) is None

    result = workflow.approve_request(_mutual_pair(workflow, alice, carol).id, admin.id)
    assert result.relationship.is_active
    assert [r.id for r in registry.list_relationships()] == [result.relationship.id, relationship.id]

    with pytest.raises(NotFoundError):
        registry.deactivate(999999)


@pytest.mark.django_db
def test_send_request_locks_both_users(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    locked = []
    original_lock_users = services.lock_users

    def recording_lock_users(*user_ids):
        locked.append(set(user_ids))
        return original_lock_users(*user_ids)

    monkeypatch.setattr(services, 'lock_users', recording_lock_users)

    RoommateRequestWorkflow().send_request(alice.id, bob.id)

    assert locked == [{alice.id, bob.id}]


@pytest.mark.django_db
def test_duplicate_request_that_slips_past_lookup_hits_constraint(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    workflow = RoommateRequestWorkflow()
    workflow.send_request(alice.id, bob.id)
    monkeypatch.setattr(
        RoommateRequestWorkflow, '_open_between',
        lambda self, user_a_id, user_b_id: RoommateRequest.objects.none()
    )

    with pytest.raises(DuplicateRequestError):
        workflow.send_request(alice.id, bob.id)

    assert RoommateRequest.objects.count() == 1


@pytest.mark.django_db
def test_concurrent_approval_is_rolled_back_as_already_related(monkeypatch) -> None:
    alice = create_user_with_profile('alice@example.com')
    bob = create_user_with_profile('bob@example.com')
    admin = create_admin()
    workflow = RoommateRequestWorkflow()
    workflow.approve_request(_mutual_pair(workflow, alice, bob).id, admin.id)
    racing = RoommateRequest.objects.create(
        requester=alice,
        target=bob,
        status=RoommateRequest.MUTUALLY_CONFIRMED
    )
    monkeypatch.setattr(workflow.registry, 'pair_is_active', lambda user_a_id, user_b_id: False)
    monkeypatch.setattr(workflow.registry, 'has_active_relationship', lambda user_id: False)

    with pytest.raises(AlreadyRelatedError):
        workflow.approve_request(racing.id, admin.id)

    racing.refresh_from_db()
    assert racing.status == RoommateRequest.MUTUALLY_CONFIRMED
    assert racing.processed_by_admin is None
    assert RoommateRelationship.objects.filter(is_active=True).count() == 1
