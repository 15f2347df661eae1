from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .exceptions import MatchingError
from .services import ActionLedger, MatchingService


def profile_data(snapshot):
    """Serialize a profile snapshot for JSON responses"""
    return {
        'id': snapshot.user_id,
        'name': snapshot.full_name,
        'age': snapshot.age,
        'gender': snapshot.gender,
        'university': snapshot.university,
        'lifestyle': snapshot.lifestyle,
        'interests': sorted(snapshot.interest_set),
        'bio': snapshot.bio,
    }


def error_response(error):
    return JsonResponse({'error': error.message}, status=error.status_code)


@login_required
@require_GET
def compatibility_detail(request, user_id):
    """Detailed compatibility breakdown with another user"""

    if user_id == request.user.id:
        return JsonResponse({'error': 'Cannot calculate compatibility with yourself'}, status=400)

    try:
        comparison = MatchingService().compare_users(request.user.id, user_id)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({
        'user': profile_data(comparison.profile2),
        'compatibility': comparison.result.as_dict(),
        'details': comparison.details,
    })


@login_required
@require_GET
def discover(request):
    """Ranked candidates the user has not liked or passed yet"""

    limit = request.GET.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            return JsonResponse({'error': 'limit must be an integer'}, status=400)
        if limit < 0:
            return JsonResponse({'error': 'limit must not be negative'}, status=400)

    try:
        ranked = MatchingService().discover_candidates(request.user.id, limit=limit)
    except MatchingError as e:
        return error_response(e)

    candidates_data = []
    for candidate in ranked:
        candidates_data.append({
            'user': profile_data(candidate.profile),
            'compatibility_score': candidate.result.overall_score,
            'compatibility_level': candidate.result.level,
        })

    return JsonResponse({
        'candidates': candidates_data,
        'total_count': len(candidates_data)
    })


def _record_action(request, user_id, action_type):
    try:
        result = ActionLedger().record_action(request.user.id, user_id, action_type)
    except MatchingError as e:
        return error_response(e)

    return JsonResponse({
        'success': result.success,
        'message': result.message,
        'is_match': result.is_match,
        'match_id': result.match_id,
    }, status=201)


@login_required
@require_POST
def like_user(request, user_id):
    """Like another user's profile"""
    return _record_action(request, user_id, 'like')


@login_required
@require_POST
def pass_user(request, user_id):
    """Pass on another user's profile"""
    return _record_action(request, user_id, 'pass')


@login_required
@require_GET
def my_matches(request):
    """Active mutual matches for the current user"""

    entries = MatchingService().matches.list_active_matches(request.user.id)

    matches_data = []
    for entry in entries:
        matches_data.append({
            'id': entry.match.id,
            'user': profile_data(entry.counterpart),
            'created_at': entry.match.created_at.isoformat(),
        })

    return JsonResponse({
        'matches': matches_data,
        'total_count': len(matches_data)
    })
