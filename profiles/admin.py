from django.contrib import admin
from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = (
        'user', 'age', 'gender', 'university', 'lifestyle',
        'completion_percentage', 'created_at'
    )
    list_filter = ('gender', 'lifestyle', 'university')
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'university', 'interests', 'bio')
    readonly_fields = ('created_at', 'updated_at', 'completion_percentage')

    fieldsets = (
        ('User', {
            'fields': ('user',)
        }),
        ('Personal Information', {
            'fields': ('age', 'gender', 'university')
        }),
        ('Lifestyle', {
            'fields': ('lifestyle', 'interests')
        }),
        ('About', {
            'fields': ('bio',)
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at', 'completion_percentage'),
            'classes': ('collapse',)
        }),
    )

    def completion_percentage(self, obj):
        return f"{obj.completion_percentage}%"
    completion_percentage.short_description = "Profile Complete"
