import json
import logging

import requests
from django.conf import settings
from rest_framework import serializers

from .base import ItemHandler, QuestionEditForm

logger = logging.getLogger(__name__)


def recaptcha_configured():
    return bool(settings.RECAPTCHA_PUBLIC_KEY and settings.RECAPTCHA_PRIVATE_KEY)


def verify_recaptcha(token, remoteip=None):
    """
    Ask the reCAPTCHA service whether ``token`` is valid.
    Returns True or an error message for the form.
    """
    payload = {'secret': settings.RECAPTCHA_PRIVATE_KEY, 'response': token}
    if remoteip:
        payload['remoteip'] = remoteip
    try:
        response = requests.post(settings.RECAPTCHA_VERIFY_URL, data=payload, timeout=10)
        response.raise_for_status()
        result = response.json()
    except requests.exceptions.Timeout:
        logger.warning("reCAPTCHA verification timed out")
        return 'The reCAPTCHA service did not answer, please try again.'
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"reCAPTCHA verification failed: {str(e)}")
        return 'The reCAPTCHA service is not available.'

    if result.get('success'):
        return True
    logger.info(f"reCAPTCHA rejected a response: {result.get('error-codes')}")
    return 'Incorrect please try again'


class CaptchaForm(QuestionEditForm):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='Captcha', label='Question')
    required = serializers.BooleanField(default=True, label='Required')
    presentation = serializers.ChoiceField(
        choices=[(count, str(count)) for count in range(3, 11)], required=False, default=3,
        label='Number of digits',
    )

    def set_data(self, item):
        data = super().set_data(item)
        data['presentation'] = int(item.presentation) if item.presentation.isdigit() else 3
        return data

    def build_presentation(self, data):
        return str(data.get('presentation', 3))


class CaptchaItem(ItemHandler):
    type = 'captcha'
    edit_form_class = CaptchaForm

    def get_hasvalue(self):
        return recaptcha_configured()

    def can_display(self, item):
        return bool(item.hasvalue) and recaptcha_configured()

    def build_editform(self, item, patientform, data=None):
        if item is not None and item.pk:
            raise serializers.ValidationError({'typ': 'There are no settings for the captcha.'})
        if patientform.items.filter(typ=self.type).exists():
            raise serializers.ValidationError({'typ': 'Only one captcha is allowed in a patient form.'})
        return super().build_editform(item, patientform, data={} if data is None else data)

    def get_display_name(self, item, withpostfix=True):
        return 'Captcha'

    def complete_form_element(self, item, form):
        name = self.response_name(item)
        tokenname = name + 'recaptcha'
        form.add_form_element(item, {
            'name': tokenname,
            'type': 'recaptcha',
            'label': self.get_display_name(item),
            'sitekey': settings.RECAPTCHA_PUBLIC_KEY,
        }, addrequiredrule=False)
        form.add_form_element(item, {'name': name, 'type': 'hidden', 'value': 1}, addrequiredrule=False)

        def validate_recaptcha(values):
            token = values.get(tokenname)
            if not token:
                return {tokenname: 'Required'}
            result = verify_recaptcha(token, form.remoteip)
            if result is not True:
                return {tokenname: result}
            return True

        form.add_validation_rule(validate_recaptcha)

    def create_value(self, value):
        return '1'

    def get_printval(self, item, value):
        return ''

    def get_data_for_external(self, item):
        if not recaptcha_configured():
            return None
        return json.dumps({'sitekey': settings.RECAPTCHA_PUBLIC_KEY})

    def get_analysed(self, item, groupid=0):
        return []
