from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserAction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('like', 'Like'), ('pass', 'Pass')], max_length=10)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('actor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='actions_made', to=settings.AUTH_USER_MODEL)),
                ('target', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='actions_received', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'roommate_matching_useraction',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['target', 'action_type'], name='useraction_target_type_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('actor', 'target'), name='unique_action_per_target'),
                    models.CheckConstraint(condition=models.Q(('actor', models.F('target')), _negated=True), name='action_not_self'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Match',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('user1', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matches_as_user1', to=settings.AUTH_USER_MODEL)),
                ('user2', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matches_as_user2', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Matches',
                'db_table': 'roommate_matching_match',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user1', 'is_active'], name='match_user1_active_idx'),
                    models.Index(fields=['user2', 'is_active'], name='match_user2_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('user1', 'user2'), name='unique_active_match_pair'),
                    models.CheckConstraint(condition=models.Q(('user1__lt', models.F('user2'))), name='match_canonical_order'),
                ],
            },
        ),
    ]
