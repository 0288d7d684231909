from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAdminUser

from .models import PlatformSetting, AuditLog
from .serializers import PlatformSettingSerializer, AuditLogSerializer


class PlatformSettingView(APIView):
    """Site name, address and support contact, as used in patient record placeholders."""
    permission_classes = [IsAdminUser]

    def get(self, request):
        site = PlatformSetting.load()
        return Response(PlatformSettingSerializer(site).data)

    def put(self, request):
        site = PlatformSetting.load()
        serializer = PlatformSettingSerializer(site, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        serializer.save()
        changed = ', '.join(sorted(serializer.validated_data)) or 'nothing'
        AuditLog.objects.create(
            actor=request.user,
            action='SETTINGS',
            target_model='PlatformSetting',
            target_object_id=str(site.pk),
            details=f"Updated platform settings: {changed}",
            ip_address=request.META.get('REMOTE_ADDR'),
        )
        return Response(serializer.data)


class AuditLogListView(generics.ListAPIView):
    """
    Admin actions, newest first.
    ?action=DELETE&target_model=Completed narrows it down, ?target_object_id=
    and ?actor= give the history of one record or one person.
    """
    queryset = AuditLog.objects.select_related('actor').order_by('-timestamp', '-id')
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminUser]

    filter_params = ['action', 'target_model', 'target_object_id']

    def get_queryset(self):
        queryset = super().get_queryset()
        for param in self.filter_params:
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})

        actor = self.request.query_params.get('actor')
        if actor and actor.isdigit():
            queryset = queryset.filter(actor_id=int(actor))
        return queryset
