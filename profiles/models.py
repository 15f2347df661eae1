from dataclasses import dataclass
from typing import FrozenSet

from django.db import models
from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone

User = get_user_model()


@dataclass(frozen=True)
class ProfileSnapshot:
    """Read-only view of a profile used for scoring and listings"""

    user_id: int
    full_name: str
    age: int
    gender: str
    university: str
    lifestyle: str
    interests: str
    role: str = 'user'
    bio: str = ''

    @property
    def interest_set(self) -> FrozenSet[str]:
        return parse_interests(self.interests)

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


def parse_interests(interests: str) -> FrozenSet[str]:
    """Split a comma-delimited interests string into normalised tags"""
    if not interests:
        return frozenset()
    return frozenset(
        tag.strip().lower() for tag in interests.split(',') if tag.strip()
    )


class UserProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')

    # Personal Information
    age = models.PositiveIntegerField(
        validators=[MinValueValidator(16), MaxValueValidator(120)]
    )
    gender = models.CharField(max_length=20, choices=[
        ('male', 'Male'),
        ('female', 'Female'),
        ('non_binary', 'Non-binary'),
        ('prefer_not_say', 'Prefer not to say'),
    ], blank=True)
    university = models.CharField(max_length=150, blank=True)

    # Lifestyle Preferences
    lifestyle = models.CharField(
        max_length=50, blank=True,
        help_text="Single lifestyle tag, e.g. quiet, social, studious"
    )
    interests = models.TextField(
        blank=True,
        help_text="Comma-separated list of interests/hobbies"
    )

    # Bio and Additional Info
    bio = models.TextField(max_length=1000, blank=True, help_text="Tell others about yourself")

    # Metadata
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles_userprofile'
        verbose_name = 'User Profile'
        verbose_name_plural = 'User Profiles'

    def __str__(self):
        return f"{self.user.get_full_name()}'s Profile"

    @property
    def interest_list(self):
        return sorted(parse_interests(self.interests))

    @property
    def completion_percentage(self):
        """Calculate profile completion percentage"""
        fields_to_check = ['gender', 'university', 'lifestyle', 'interests', 'bio']
        completed_fields = sum(1 for field in fields_to_check if getattr(self, field))
        return round((completed_fields / len(fields_to_check)) * 100)

    def to_snapshot(self) -> ProfileSnapshot:
        return ProfileSnapshot(
            user_id=self.user_id,
            full_name=self.user.get_full_name(),
            age=self.age,
            gender=self.gender,
            university=self.university,
            lifestyle=self.lifestyle,
            interests=self.interests,
            role=self.user.role,
            bio=self.bio,
        )
