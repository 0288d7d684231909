from django.core.exceptions import ImproperlyConfigured
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied


class AccessDenied(PermissionDenied):
    default_detail = 'Sorry, but you do not currently have permissions to do that.'
    default_code = 'nopermission'


class NotOpenError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This patient form is not open.'
    default_code = 'patientform_is_not_open'


class EmptyFormError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'No questions are available yet.'
    default_code = 'no_items_available_yet'


class AlreadySubmitted(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'You have already completed this activity.'
    default_code = 'this_patientform_is_already_submitted'


class NotStarted(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'No attempt in progress.'
    default_code = 'not_started'


class NotCompletedYet(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'This patient form has not been completed yet.'
    default_code = 'not_completed_yet'


class AnonymousForm(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Not available for anonymous patient forms.'
    default_code = 'anonymous'


class NotInGroup(PermissionDenied):
    default_detail = 'You are not a member of this group.'
    default_code = 'notingroup'


class InvalidPage(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The requested page does not exist.'
    default_code = 'invalidpage'


class UnknownItemType(ImproperlyConfigured):
    """An item carries a type tag no handler is registered for."""

    def __init__(self, typ):
        self.typ = typ
        super().__init__(f"No item handler registered for type '{typ}'")


def make_warning(item, itemid, warningcode, message):
    return {
        'item': item,
        'itemid': itemid,
        'warningcode': warningcode,
        'message': message,
    }


def insufficient_responses_warning(patientform):
    return make_warning(
        'patientform', patientform.id, 'insufficientresponsesforthisgroup',
        'There are insufficient responses for this group',
    )
