from django.core.management.base import BaseCommand, CommandError

from roommate_matching.exceptions import NotFoundError
from roommate_matching.services import MatchingService


class Command(BaseCommand):
    help = 'Show compatibility rankings for a user or the best pairs overall'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user-id',
            type=int,
            help='Rank candidates for a specific user ID',
        )
        parser.add_argument(
            '--other-user-id',
            type=int,
            help='Show the detailed breakdown between --user-id and this user',
        )
        parser.add_argument(
            '--limit',
            type=int,
            default=10,
            help='Number of candidates or pairs to show',
        )

    def handle(self, *args, **options):
        matching_service = MatchingService()
        limit = options['limit']

        if options['other_user_id'] and not options['user_id']:
            raise CommandError('--other-user-id requires --user-id')

        if limit < 0:
            raise CommandError('--limit must not be negative')

        if options['user_id'] and options['other_user_id']:
            try:
                comparison = matching_service.compare_users(options['user_id'], options['other_user_id'])
            except NotFoundError as e:
                raise CommandError(e.message)

            result = comparison.result
            self.stdout.write(
                f"{comparison.profile1.full_name} ↔ {comparison.profile2.full_name}: "
                f"{result.overall_score:.1f}% ({result.level})"
            )
            for component, description in comparison.details.items():
                score = getattr(result, f"{component}_score")
                self.stdout.write(f"  {component:<10} {score:>3}  {description}")

        elif options['user_id']:
            try:
                ranked = matching_service.discover_candidates(options['user_id'], limit=limit)
            except NotFoundError as e:
                raise CommandError(e.message)

            self.stdout.write(f"Top {len(ranked)} candidates for user {options['user_id']}:")
            for candidate in ranked:
                self.stdout.write(
                    f"  - {candidate.profile.full_name}: "
                    f"{candidate.result.overall_score:.1f}% ({candidate.result.level})"
                )

        else:
            # Score every pair of regular users
            profiles = matching_service.profiles.candidate_snapshots()
            self.stdout.write(f"Processing {len(profiles)} users...")

            pairs = []
            for i, profile1 in enumerate(profiles):
                for profile2 in profiles[i + 1:]:
                    result = matching_service.calculator.calculate(profile1, profile2)
                    pairs.append((result.overall_score, profile1, profile2, result))

            pairs.sort(key=lambda pair: (-pair[0], pair[1].user_id, pair[2].user_id))

            self.stdout.write(f"Top {min(limit, len(pairs))} compatibility scores:")
            for overall_score, profile1, profile2, result in pairs[:limit]:
                self.stdout.write(
                    f"  {profile1.full_name} ↔ {profile2.full_name}: "
                    f"{overall_score:.1f}% ({result.level})"
                )

        self.stdout.write(self.style.SUCCESS('Done!'))
