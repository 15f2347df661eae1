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
            name='RoommateRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(blank=True, max_length=500)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('mutually_confirmed', 'Mutually Confirmed'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('processed_by_admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='processed_roommate_requests', to=settings.AUTH_USER_MODEL)),
                ('requester', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_roommate_requests', to=settings.AUTH_USER_MODEL)),
                ('target', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='received_roommate_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'roommates_roommaterequest',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'created_at'], name='request_status_created_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ['pending', 'mutually_confirmed'])), fields=('requester', 'target'), name='unique_open_roommate_request'),
                    models.CheckConstraint(condition=models.Q(('requester', models.F('target')), _negated=True), name='roommate_request_not_self'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoommateRelationship',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('deactivated_at', models.DateTimeField(blank=True, null=True)),
                ('approved_by_admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_roommate_relationships', to=settings.AUTH_USER_MODEL)),
                ('original_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='relationships', to='roommates.roommaterequest')),
                ('user1', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='roommate_relationships_as_user1', to=settings.AUTH_USER_MODEL)),
                ('user2', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='roommate_relationships_as_user2', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'roommates_roommaterelationship',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user1', 'is_active'], name='roommate_user1_active_idx'),
                    models.Index(fields=['user2', 'is_active'], name='roommate_user2_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('user1', 'user2'), name='unique_active_roommate_pair'),
                    models.CheckConstraint(condition=models.Q(('user1__lt', models.F('user2'))), name='roommate_canonical_order'),
                ],
            },
        ),
    ]
