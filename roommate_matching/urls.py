from django.urls import path
from . import views

app_name = 'matching'

urlpatterns = [
    # Compatibility and discovery
    path('compatibility/<int:user_id>/', views.compatibility_detail, name='compatibility_detail'),
    path('discover/', views.discover, name='discover'),

    # User actions
    path('like/<int:user_id>/', views.like_user, name='like'),
    path('pass/<int:user_id>/', views.pass_user, name='pass'),

    path('my-matches/', views.my_matches, name='my_matches'),
]
