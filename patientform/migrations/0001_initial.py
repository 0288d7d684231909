import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('courses', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PatientForm',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('intro', models.TextField(blank=True)),
                ('anonymous', models.PositiveSmallIntegerField(choices=[(1, 'Anonymous'), (2, "User's name will be logged and shown with answers")], default=1)),
                ('multiple_submit', models.BooleanField(default=False)),
                ('autonumbering', models.BooleanField(default=True)),
                ('publish_stats', models.BooleanField(default=False)),
                ('group_mode', models.PositiveSmallIntegerField(choices=[(0, 'No groups'), (1, 'Separate groups'), (2, 'Visible groups')], default=0)),
                ('page_after_submit', models.TextField(blank=True)),
                ('site_after_submit', models.CharField(blank=True, max_length=255)),
                ('completion_submit', models.BooleanField(default=False)),
                ('timeopen', models.DateTimeField(blank=True, null=True)),
                ('timeclose', models.DateTimeField(blank=True, null=True)),
                ('timemodified', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='patientforms', to='courses.course')),
            ],
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('typ', models.CharField(max_length=255)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('label', models.CharField(blank=True, max_length=255)),
                ('presentation', models.TextField(blank=True)),
                ('hasvalue', models.BooleanField(default=False)),
                ('position', models.PositiveIntegerField(default=0)),
                ('required', models.BooleanField(default=False)),
                ('dependvalue', models.CharField(blank=True, max_length=255)),
                ('options', models.CharField(blank=True, max_length=255)),
                ('dependitem', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='dependants', to='patientform.item')),
                ('patientform', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='patientform.patientform')),
            ],
            options={
                'ordering': ['position', 'id'],
            },
        ),
        migrations.CreateModel(
            name='CompletedTmp',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('anonymous_response', models.BooleanField(default=False)),
                ('timemodified', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='courses.course')),
                ('patientform', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attempts_in_progress', to='patientform.patientform')),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.CASCADE, related_name='patientform_attempts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('patientform', 'user', 'course')},
            },
        ),
        migrations.CreateModel(
            name='ValueTmp',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.TextField(blank=True)),
                ('completed', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values', to='patientform.completedtmp')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='courses.course')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values_tmp', to='patientform.item')),
            ],
            options={
                'unique_together': {('completed', 'item')},
            },
        ),
        migrations.CreateModel(
            name='Completed',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('anonymous_response', models.BooleanField(default=False)),
                ('random_response', models.PositiveIntegerField(default=0)),
                ('timemodified', models.DateTimeField(default=django.utils.timezone.now)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='courses.course')),
                ('groups', models.ManyToManyField(blank=True, related_name='patientform_completions', to='courses.coursegroup')),
                ('patientform', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='completions', to='patientform.patientform')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='patientform_completions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['timemodified', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Value',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.TextField(blank=True)),
                ('completed', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values', to='patientform.completed')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='courses.course')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values', to='patientform.item')),
            ],
            options={
                'unique_together': {('completed', 'item')},
            },
        ),
        migrations.CreateModel(
            name='SubmissionTracking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timecreated', models.DateTimeField(auto_now_add=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='courses.course')),
                ('patientform', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trackings', to='patientform.patientform')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='ActivityCompletion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('viewed', models.BooleanField(default=False)),
                ('completed', models.BooleanField(default=False)),
                ('timemodified', models.DateTimeField(auto_now=True)),
                ('patientform', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity_completions', to='patientform.patientform')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('patientform', 'user')},
            },
        ),
    ]
