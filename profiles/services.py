from typing import Dict, Iterable, List, Optional

from .models import ProfileSnapshot, UserProfile


class ProfileStore:
    """Read access to profiles for the matching core"""

    def _queryset(self):
        return UserProfile.objects.select_related('user').filter(user__is_active=True)

    def get_snapshot(self, user_id: int) -> Optional[ProfileSnapshot]:
        """Return the snapshot for a user, or None when no profile exists"""
        profile = self._queryset().filter(user_id=user_id).first()
        return profile.to_snapshot() if profile else None

    def exists(self, *user_ids: int) -> bool:
        wanted = set(user_ids)
        return self._queryset().filter(user_id__in=wanted).count() == len(wanted)

    def get_snapshots(self, user_ids: Iterable[int]) -> Dict[int, ProfileSnapshot]:
        profiles = self._queryset().filter(user_id__in=list(user_ids))
        return {profile.user_id: profile.to_snapshot() for profile in profiles}

    def candidate_snapshots(self, exclude_ids: Iterable[int] = ()) -> List[ProfileSnapshot]:
        """Profiles of regular users, minus the given ids"""
        profiles = self._queryset().exclude(
            user_id__in=list(exclude_ids)
        ).exclude(
            user__user_type='admin'
        ).exclude(
            user__is_staff=True
        ).order_by('user_id')
        return [profile.to_snapshot() for profile in profiles]
