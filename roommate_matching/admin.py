from django.contrib import admin

from .models import Match, UserAction


@admin.register(UserAction)
class UserActionAdmin(admin.ModelAdmin):
    list_display = ('actor', 'target', 'action_type', 'created_at')
    list_filter = ('action_type', 'created_at')
    search_fields = (
        'actor__email', 'actor__first_name', 'actor__last_name',
        'target__email', 'target__first_name', 'target__last_name'
    )
    readonly_fields = ('actor', 'target', 'action_type', 'created_at')
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Users', {
            'fields': ('actor', 'target')
        }),
        ('Action', {
            'fields': ('action_type', 'created_at')
        })
    )

    def has_add_permission(self, request):
        # Actions are only recorded through the like/pass endpoints
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('actor', 'target')


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ('user_pair', 'is_active', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = (
        'user1__email', 'user1__first_name', 'user1__last_name',
        'user2__email', 'user2__first_name', 'user2__last_name'
    )
    readonly_fields = ('user1', 'user2', 'created_at')
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Users', {
            'fields': ('user1', 'user2')
        }),
        ('Status', {
            'fields': ('is_active', 'created_at')
        })
    )

    def user_pair(self, obj):
        return f"{obj.user1.get_short_name()} ↔ {obj.user2.get_short_name()}"
    user_pair.short_description = 'User Pair'

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user1', 'user2')
