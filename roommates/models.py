from django.db import models
from django.db.models import F, Q
from django.contrib.auth import get_user_model
from django.utils import timezone

User = get_user_model()


class RoommateRequest(models.Model):
    """Request from one user to become roommates with another"""

    PENDING = 'pending'
    MUTUALLY_CONFIRMED = 'mutually_confirmed'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (MUTUALLY_CONFIRMED, 'Mutually Confirmed'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    OPEN_STATUSES = (PENDING, MUTUALLY_CONFIRMED)
    TERMINAL_STATUSES = (APPROVED, REJECTED)

    requester = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_roommate_requests'
    )
    target = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='received_roommate_requests'
    )
    message = models.TextField(max_length=500, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)

    # Moderation
    processed_by_admin = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='processed_roommate_requests'
    )
    processed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'roommates_roommaterequest'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['requester', 'target'],
                condition=Q(status__in=['pending', 'mutually_confirmed']),
                name='unique_open_roommate_request'
            ),
            models.CheckConstraint(condition=~Q(requester=F('target')), name='roommate_request_not_self'),
        ]
        indexes = [
            models.Index(fields=['status', 'created_at'], name='request_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.requester.get_short_name()} -> {self.target.get_short_name()} ({self.get_status_display()})"

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES


class RoommateRelationship(models.Model):
    """Admin-approved roommate pairing, stored with the smaller user id first"""

    user1 = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='roommate_relationships_as_user1'
    )
    user2 = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='roommate_relationships_as_user2'
    )
    approved_by_admin = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='approved_roommate_relationships'
    )
    original_request = models.ForeignKey(
        RoommateRequest,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='relationships'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'roommates_roommaterelationship'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user1', 'user2'],
                condition=Q(is_active=True),
                name='unique_active_roommate_pair'
            ),
            models.CheckConstraint(condition=Q(user1__lt=F('user2')), name='roommate_canonical_order'),
        ]
        indexes = [
            models.Index(fields=['user1', 'is_active'], name='roommate_user1_active_idx'),
            models.Index(fields=['user2', 'is_active'], name='roommate_user2_active_idx'),
        ]

    def __str__(self):
        return f"{self.user1.get_short_name()} & {self.user2.get_short_name()}"

    def other_user_id(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id
