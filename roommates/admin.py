from django.contrib import admin, messages

from roommate_matching.exceptions import MatchingError
from .models import RoommateRelationship, RoommateRequest
from .services import RoommateRelationshipRegistry, RoommateRequestWorkflow


@admin.register(RoommateRequest)
class RoommateRequestAdmin(admin.ModelAdmin):
    list_display = (
        'requester', 'target', 'status', 'processed_by_admin',
        'created_at', 'processed_at'
    )
    list_filter = ('status', 'created_at', 'processed_at')
    search_fields = (
        'requester__email', 'requester__first_name', 'requester__last_name',
        'target__email', 'target__first_name', 'target__last_name'
    )
    readonly_fields = ('requester', 'target', 'status', 'processed_by_admin', 'created_at', 'processed_at')
    date_hierarchy = 'created_at'
    actions = ['approve_selected', 'reject_selected']

    fieldsets = (
        ('Users', {
            'fields': ('requester', 'target')
        }),
        ('Request', {
            'fields': ('message', 'status')
        }),
        ('Moderation', {
            'fields': ('processed_by_admin', 'processed_at', 'created_at')
        })
    )

    def _process(self, request, queryset, operation, verb):
        workflow = RoommateRequestWorkflow()
        processed = 0
        for roommate_request in queryset.order_by('created_at'):
            try:
                getattr(workflow, operation)(roommate_request.id, request.user.id)
                processed += 1
            except MatchingError as e:
                self.message_user(request, f"Request {roommate_request.id}: {e.message}", messages.WARNING)
        if processed:
            self.message_user(request, f"{processed} request(s) {verb}.", messages.SUCCESS)

    def approve_selected(self, request, queryset):
        self._process(request, queryset, 'approve_request', 'approved')
    approve_selected.short_description = 'Approve selected requests'

    def reject_selected(self, request, queryset):
        self._process(request, queryset, 'reject_request', 'rejected')
    reject_selected.short_description = 'Reject selected requests'

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('requester', 'target', 'processed_by_admin')


@admin.register(RoommateRelationship)
class RoommateRelationshipAdmin(admin.ModelAdmin):
    list_display = ('user_pair', 'is_active', 'approved_by_admin', 'created_at', 'deactivated_at')
    list_filter = ('is_active', 'created_at')
    search_fields = (
        'user1__email', 'user1__first_name', 'user1__last_name',
        'user2__email', 'user2__first_name', 'user2__last_name'
    )
    readonly_fields = (
        'user1', 'user2', 'approved_by_admin', 'original_request',
        'is_active', 'created_at', 'deactivated_at'
    )
    date_hierarchy = 'created_at'
    actions = ['deactivate_selected']

    fieldsets = (
        ('Users', {
            'fields': ('user1', 'user2')
        }),
        ('Approval', {
            'fields': ('approved_by_admin', 'original_request', 'created_at')
        }),
        ('Status', {
            'fields': ('is_active', 'deactivated_at')
        })
    )

    def user_pair(self, obj):
        return f"{obj.user1.get_short_name()} ↔ {obj.user2.get_short_name()}"
    user_pair.short_description = 'Roommates'

    def deactivate_selected(self, request, queryset):
        registry = RoommateRelationshipRegistry()
        deactivated = 0
        for relationship in queryset.filter(is_active=True):
            registry.deactivate(relationship.id)
            deactivated += 1
        self.message_user(request, f"{deactivated} relationship(s) deactivated.", messages.SUCCESS)
    deactivate_selected.short_description = 'Deactivate selected relationships'

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user1', 'user2', 'approved_by_admin')
