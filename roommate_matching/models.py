from django.db import models
from django.db.models import F, Q
from django.contrib.auth import get_user_model
from django.utils import timezone

User = get_user_model()


class UserAction(models.Model):
    """A directional Like or Pass from one user to another"""

    LIKE = 'like'
    PASS = 'pass'
    ACTION_TYPES = [
        (LIKE, 'Like'),
        (PASS, 'Pass'),
    ]

    actor = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='actions_made'
    )
    target = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='actions_received'
    )
    action_type = models.CharField(max_length=10, choices=ACTION_TYPES)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'roommate_matching_useraction'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['actor', 'target'], name='unique_action_per_target'),
            models.CheckConstraint(condition=~Q(actor=F('target')), name='action_not_self'),
        ]
        indexes = [
            models.Index(fields=['target', 'action_type'], name='useraction_target_type_idx'),
        ]

    def __str__(self):
        return f"{self.actor.get_short_name()} -> {self.target.get_short_name()}: {self.get_action_type_display()}"

    @property
    def past_tense(self):
        return 'liked' if self.action_type == self.LIKE else 'passed'


class Match(models.Model):
    """Mutual like between two users, stored with the smaller user id first"""

    user1 = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='matches_as_user1'
    )
    user2 = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='matches_as_user2'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'roommate_matching_match'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user1', 'user2'],
                condition=Q(is_active=True),
                name='unique_active_match_pair'
            ),
            models.CheckConstraint(condition=Q(user1__lt=F('user2')), name='match_canonical_order'),
        ]
        indexes = [
            models.Index(fields=['user1', 'is_active'], name='match_user1_active_idx'),
            models.Index(fields=['user2', 'is_active'], name='match_user2_active_idx'),
        ]
        verbose_name_plural = 'Matches'

    def __str__(self):
        return f"{self.user1.get_short_name()} & {self.user2.get_short_name()}"

    def other_user_id(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id
