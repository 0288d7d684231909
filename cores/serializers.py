from rest_framework import serializers

from .models import PlatformSetting, AuditLog


class PlatformSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlatformSetting
        fields = ['site_name', 'site_url', 'support_email']


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.CharField(source='actor.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'actor', 'actor_email', 'action', 'target_model',
            'target_object_id', 'ip_address', 'timestamp', 'details'
        ]
