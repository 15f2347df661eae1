import json

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from roommate_matching.exceptions import MatchingError
from roommate_matching.views import error_response, profile_data
from .services import RoommateRelationshipRegistry, RoommateRequestWorkflow


def request_data(roommate_request, other_user):
    return {
        'id': roommate_request.id,
        'other_user': {
            'id': other_user.id,
            'name': other_user.get_full_name(),
            'email': other_user.email,
        },
        'message': roommate_request.message,
        'status': roommate_request.status,
        'created_at': roommate_request.created_at.isoformat(),
        'processed_at': roommate_request.processed_at.isoformat() if roommate_request.processed_at else None,
    }


def roommate_data(entry):
    data = {
        'relationship_id': entry.relationship.id,
        'roommate_id': entry.roommate.id,
        'roommate_name': entry.roommate.get_full_name(),
        'roommate_email': entry.roommate.email,
        'since': entry.relationship.created_at.isoformat(),
    }
    if entry.profile:
        data['profile'] = profile_data(entry.profile)
    return data


def relationship_data(relationship):
    return {
        'id': relationship.id,
        'user1': {'id': relationship.user1_id, 'name': relationship.user1.get_full_name()},
        'user2': {'id': relationship.user2_id, 'name': relationship.user2.get_full_name()},
        'approved_by_admin_id': relationship.approved_by_admin_id,
        'original_request_id': relationship.original_request_id,
        'is_active': relationship.is_active,
        'created_at': relationship.created_at.isoformat(),
    }


def _admin_required(request):
    if not request.user.is_admin:
        return JsonResponse({'error': 'Not authorized'}, status=403)
    return None


@login_required
@require_POST
def send_request(request):
    """Send a roommate request to another user"""

    # Handle both AJAX JSON and regular form POST
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            return JsonResponse({'error': 'Invalid JSON'}, status=400)
        if not isinstance(data, dict):
            return JsonResponse({'error': 'Invalid JSON'}, status=400)
    else:
        data = request.POST

    try:
        target_id = int(data.get('target_user_id'))
    except (TypeError, ValueError):
        return JsonResponse({'error': 'target_user_id is required'}, status=400)

    message = data.get('message') or ''
    if not isinstance(message, str):
        return JsonResponse({'error': 'message must be a string'}, status=400)
    message = message.strip()

    try:
        result = RoommateRequestWorkflow().send_request(request.user.id, target_id, message)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({
        'id': result.request.id,
        'status': result.request.status,
        'mutually_confirmed': result.mutually_confirmed,
        'message': result.message,
    }, status=201)


@login_required
@require_GET
def my_requests(request):
    """Sent and received requests plus active roommates"""

    summary = RoommateRequestWorkflow().requests_for_user(request.user.id)

    return JsonResponse({
        'sent_requests': [request_data(r, r.target) for r in summary.sent],
        'received_requests': [request_data(r, r.requester) for r in summary.received],
        'active_roommates': [roommate_data(entry) for entry in summary.roommates],
    })


@login_required
@require_GET
def pending_requests(request):
    """Mutually confirmed requests waiting for an admin decision"""

    denied = _admin_required(request)
    if denied:
        return denied

    pending_data = []
    for roommate_request in RoommateRequestWorkflow().pending_for_review():
        pending_data.append({
            'id': roommate_request.id,
            'requester': {
                'id': roommate_request.requester_id,
                'name': roommate_request.requester.get_full_name(),
                'email': roommate_request.requester.email,
            },
            'target': {
                'id': roommate_request.target_id,
                'name': roommate_request.target.get_full_name(),
                'email': roommate_request.target.email,
            },
            'message': roommate_request.message,
            'created_at': roommate_request.created_at.isoformat(),
        })

    return JsonResponse({
        'requests': pending_data,
        'total_count': len(pending_data)
    })


@login_required
@require_POST
def approve_request(request, request_id):
    """Approve a mutually confirmed request and create the relationship"""

    denied = _admin_required(request)
    if denied:
        return denied

    try:
        result = RoommateRequestWorkflow().approve_request(request_id, request.user.id)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({
        'relationship_id': result.relationship.id,
        'message': result.message,
    })


@login_required
@require_POST
def reject_request(request, request_id):
    """Reject a roommate request"""

    denied = _admin_required(request)
    if denied:
        return denied

    try:
        RoommateRequestWorkflow().reject_request(request_id, request.user.id)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({'message': 'Roommate request has been rejected'})


@login_required
@require_GET
def relationships(request):
    """All roommate relationships, newest first"""

    denied = _admin_required(request)
    if denied:
        return denied

    relationships_data = [
        relationship_data(relationship)
        for relationship in RoommateRelationshipRegistry().list_relationships()
    ]

    return JsonResponse({
        'relationships': relationships_data,
        'total_count': len(relationships_data)
    })


@login_required
@require_POST
def deactivate_relationship(request, relationship_id):
    """Deactivate a roommate relationship"""

    denied = _admin_required(request)
    if denied:
        return denied

    try:
        relationship = RoommateRelationshipRegistry().deactivate(relationship_id)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({
        'message': (
            f"Roommate relationship between {relationship.user1.get_full_name()} and "
            f"{relationship.user2.get_full_name()} has been deactivated"
        ),
    })


@login_required
@require_GET
def user_roommate(request, user_id):
    """Active roommate of any user, null when they have none"""

    entry = RoommateRelationshipRegistry().get_active_roommate_of(user_id)
    return JsonResponse({'roommate': roommate_data(entry) if entry else None})
