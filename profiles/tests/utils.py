from django.contrib.auth import get_user_model

from profiles.models import UserProfile

User = get_user_model()

PROFILE_DEFAULTS = {
    'age': 21,
    'gender': 'female',
    'university': 'UNSW',
    'lifestyle': 'quiet',
    'interests': 'music, hiking',
}


def create_user_with_profile(email, first_name='Test', last_name='User', **profile_fields):
    user = User.objects.create_user(
        email=email,
        password='testpass123',
        first_name=first_name,
        last_name=last_name,
    )
    UserProfile.objects.create(user=user, **{**PROFILE_DEFAULTS, **profile_fields})
    return user


def create_admin(email='admin@example.com', with_profile=False):
    admin = User.objects.create_admin(email=email, password='testpass123', first_name='Admin')
    if with_profile:
        UserProfile.objects.create(user=admin, **PROFILE_DEFAULTS)
    return admin
