from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Django Allauth
    path('auth/', include('allauth.urls')),

    # Matching system
    path('matching/', include('roommate_matching.urls')),

    # Roommate requests and relationships
    path('roommates/', include('roommates.urls')),
]
