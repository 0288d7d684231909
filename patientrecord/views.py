from django.contrib.auth import get_user_model
from django.http import Http404
from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAdminUser

from cores.models import PlatformSetting
from .models import ProfileField, ProfileFieldData

User = get_user_model()

WELCOME_FIELDS = ['sitename', 'supportemail', 'siteurl']
DEFAULT_FIELDS = ['username', 'email', 'firstname', 'lastname', 'fullname', 'description']


def placeholder(field):
    return f"[[{field}]]"


def get_user_custom_values(user):
    values = dict(
        ProfileFieldData.objects.filter(user=user).values_list('field__shortname', 'data')
    )
    return {field.shortname: values.get(field.shortname, '') for field in ProfileField.objects.all()}


def get_welcome_values():
    site = PlatformSetting.load()
    return {
        'sitename': site.site_name,
        'supportemail': site.support_email,
        'siteurl': site.site_url,
    }


def get_user_default_values(user):
    return {
        'username': user.username,
        'email': user.email,
        'firstname': user.first_name,
        'lastname': user.last_name,
        'fullname': user.get_full_name(),
        'description': user.bio or '',
    }


class PatientRecordView(APIView):
    """
    Placeholders available to message templates and the value each one
    takes for a user (the caller, or ?userid=).
    """
    permission_classes = [IsAdminUser]

    def get(self, request):
        user = request.user
        userid = request.query_params.get('userid')
        if userid:
            if not userid.isdigit():
                raise Http404("No user with that id.")
            user = get_object_or_404(User, id=int(userid))

        customvalues = get_user_custom_values(user)
        welcomevalues = get_welcome_values()
        defaultvalues = get_user_default_values(user)

        return Response({
            'userid': user.id,
            'customprofilefields': [
                {'field': placeholder(field), 'value': value} for field, value in customvalues.items()
            ],
            'welcomefields': [
                {'field': placeholder(field), 'value': welcomevalues[field]} for field in WELCOME_FIELDS
            ],
            'defaultprofilefields': [
                {'field': placeholder(field), 'value': defaultvalues[field]} for field in DEFAULT_FIELDS
            ],
        })
