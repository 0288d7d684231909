import itertools

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from courses.models import Course, CourseGroup, Enrolment
from patientform.items import get_item_handler
from patientform.models import PatientForm, Item, Completed, Value

User = get_user_model()

_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def _isolation(settings):
    # Captcha items stay hidden unless a test configures reCAPTCHA
    settings.RECAPTCHA_PUBLIC_KEY = ''
    settings.RECAPTCHA_PRIVATE_KEY = ''
    settings.PATIENTFORM_MIN_ANONYMOUS_COUNT_IN_GROUP = 2
    settings.PATIENTFORM_DEFAULT_PAGE_COUNT = 20
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(first_name='Pat', last_name='Doe', **kwargs):
        number = next(_counter)
        kwargs.setdefault('email', f"user{number}@example.org")
        kwargs.setdefault('username', f"user{number}")
        password = kwargs.pop('password', 'secret-pass-123')
        return User.objects.create_user(password=password, first_name=first_name, last_name=last_name, **kwargs)
    return _make_user


@pytest.fixture
def course(db):
    return Course.objects.create(fullname='Cardiology basics', shortname='CARDIO1', summary='Heart and vessels')


@pytest.fixture
def enrol():
    def _enrol(user, course, role=Enrolment.Role.STUDENT):
        Enrolment.objects.create(user=user, course=course, role=role)
        return user
    return _enrol


@pytest.fixture
def student(make_user, course, enrol):
    return enrol(make_user(first_name='Sam', last_name='Student'), course)


@pytest.fixture
def teacher(make_user, course, enrol):
    return enrol(make_user(first_name='Tess', last_name='Teacher'), course, Enrolment.Role.EDITING_TEACHER)


@pytest.fixture
def admin_user(make_user):
    return make_user(first_name='Ada', last_name='Admin', is_staff=True, is_superuser=True)


@pytest.fixture
def make_group(course):
    def _make_group(name, members=()):
        group = CourseGroup.objects.create(course=course, name=name)
        group.members.set(members)
        return group
    return _make_group


@pytest.fixture
def make_form(course):
    def _make_form(**kwargs):
        kwargs.setdefault('name', 'Intake questionnaire')
        kwargs.setdefault('course', course)
        return PatientForm.objects.create(**kwargs)
    return _make_form


@pytest.fixture
def add_item():
    """Append an item of ``typ`` to a form, hasvalue following the item type."""
    def _add_item(patientform, typ, **kwargs):
        kwargs.setdefault('hasvalue', get_item_handler(typ).get_hasvalue())
        kwargs.setdefault('position', patientform.items.count() + 1)
        return Item.objects.create(patientform=patientform, typ=typ, **kwargs)
    return _add_item


@pytest.fixture
def make_completed():
    def _make_completed(patientform, user=None, groups=(), values=None):
        completed = Completed.objects.create(
            patientform=patientform,
            user=user,
            course=patientform.course,
            anonymous_response=patientform.is_anonymous,
        )
        completed.groups.set(groups)
        for item, value in (values or {}).items():
            Value.objects.create(completed=completed, item=item, course=patientform.course, value=value)
        return completed
    return _make_completed
