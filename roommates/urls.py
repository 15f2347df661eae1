from django.urls import path
from . import views

app_name = 'roommates'

urlpatterns = [
    # Requests
    path('requests/', views.send_request, name='send_request'),
    path('requests/mine/', views.my_requests, name='my_requests'),

    # Admin moderation
    path('requests/pending/', views.pending_requests, name='pending_requests'),
    path('requests/<int:request_id>/approve/', views.approve_request, name='approve_request'),
    path('requests/<int:request_id>/reject/', views.reject_request, name='reject_request'),
    path('relationships/', views.relationships, name='relationships'),
    path('relationships/<int:relationship_id>/deactivate/', views.deactivate_relationship, name='deactivate_relationship'),

    path('user/<int:user_id>/roommate/', views.user_roommate, name='user_roommate'),
]
