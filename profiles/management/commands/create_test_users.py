from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.db import transaction
from profiles.models import UserProfile
import random

User = get_user_model()


class Command(BaseCommand):
    help = 'Create test users with sample roommate profiles for development'

    def add_arguments(self, parser):
        parser.add_argument(
            '--count',
            type=int,
            default=5,
            help='Number of test users to create (default: 5)',
        )
        parser.add_argument(
            '--admin',
            action='store_true',
            help='Also create an admin account (admin@example.com)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            help='Random seed for reproducible profiles',
        )

    def handle(self, *args, **options):
        count = options['count']
        rng = random.Random(options['seed'])

        sample_data = {
            'universities': ['University of Sydney', 'UNSW', 'UTS', 'Macquarie University'],
            'lifestyles': ['quiet', 'social', 'studious', 'active', 'organized', 'calm', 'outgoing'],
            'interests': ['Reading', 'Cooking', 'Hiking', 'Music', 'Photography', 'Yoga', 'Gaming', 'Travel'],
            'bios': [
                "I'm a friendly and clean person looking for like-minded roommates. I enjoy cooking and would love to share meals together!",
                "Student in tech, clean and respectful. Looking for a quiet place to call home.",
                "Student seeking affordable accommodation with other students. Love music and outdoor activities.",
                "Easy-going person who values cleanliness and good communication. Happy to help with household chores.",
                "Creative person looking for an inspiring living space with interesting roommates."
            ]
        }

        if options['admin']:
            if User.objects.filter(email='admin@example.com').exists():
                self.stdout.write(self.style.WARNING('User admin@example.com already exists, skipping'))
            else:
                User.objects.create_admin(
                    email='admin@example.com',
                    password='testpass123',
                    first_name='Admin',
                    last_name='Demo'
                )
                self.stdout.write(self.style.SUCCESS('Created admin: admin@example.com'))

        created_users = []

        for i in range(count):
            email = f'testuser{i+1}@example.com'

            if User.objects.filter(email=email).exists():
                self.stdout.write(
                    self.style.WARNING(f'User {email} already exists, skipping')
                )
                continue

            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    password='testpass123',
                    first_name=f'TestUser{i+1}',
                    last_name='Demo'
                )

                profile = UserProfile.objects.create(
                    user=user,
                    age=rng.randint(18, 30),
                    gender=rng.choice(['male', 'female', 'non_binary']),
                    university=rng.choice(sample_data['universities']),
                    lifestyle=rng.choice(sample_data['lifestyles']),
                    interests=', '.join(rng.sample(sample_data['interests'], rng.randint(2, 5))),
                    bio=rng.choice(sample_data['bios']),
                )

            created_users.append(user.email)
            self.stdout.write(
                self.style.SUCCESS(f'Created user: {user.email} with profile ({profile.completion_percentage}% complete)')
            )

        if created_users:
            self.stdout.write(
                self.style.SUCCESS(f'\nSuccessfully created {len(created_users)} test users')
            )
            self.stdout.write('Login credentials: password is "testpass123" for all test users')
        else:
            self.stdout.write(
                self.style.WARNING('No new users were created')
            )
