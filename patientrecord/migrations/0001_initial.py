import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ProfileField',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('shortname', models.CharField(max_length=100, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('sortorder', models.PositiveIntegerField(default=0)),
            ],
            options={
                'ordering': ['sortorder', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ProfileFieldData',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data', models.TextField(blank=True)),
                ('field', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='data', to='patientrecord.profilefield')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='profile_field_data', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('field', 'user')},
            },
        ),
    ]
