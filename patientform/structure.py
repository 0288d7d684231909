"""
Read side of a patient form: its items, who may see what, and the reports
built on top of the finalized attempts.
"""
import random

from django.conf import settings
from django.db.models import Exists, F, Max, OuterRef
from django.utils import timezone

from courses.permissions import has_capability, users_with_capability

from .exceptions import AnonymousForm, insufficient_responses_warning
from .items import get_item_handler
from .models import Completed, CompletedTmp, SubmissionTracking

NON_RESPONDENT_SORTS = {
    'firstname': [F('first_name').asc(), F('last_name').asc()],
    'lastname': [F('last_name').asc(), F('first_name').asc()],
    'lastaccess': [F('last_login').asc(nulls_first=True), F('id').asc()],
}


class PatientFormStructure:

    def __init__(self, patientform, user=None, now=None):
        self.patientform = patientform
        self.course = patientform.course
        self.user = user
        self.now = now
        self._items = None

    def get_items(self, hasvalueonly=False):
        """Items in position order, value items numbered when autonumbering is on."""
        if self._items is None:
            self._items = list(self.patientform.items.order_by('position', 'id'))
            itemnr = 0
            for item in self._items:
                item.itemnr = None
                if item.hasvalue and self.patientform.autonumbering:
                    itemnr += 1
                    item.itemnr = itemnr
        if hasvalueonly:
            return [item for item in self._items if item.hasvalue]
        return list(self._items)

    def is_empty(self):
        return not any(item.typ != 'pagebreak' for item in self.get_items())

    def is_open(self):
        return self.patientform.is_open(self.now or timezone.now())

    def is_anonymous(self):
        return self.patientform.is_anonymous

    def has_capability(self, capability):
        return has_capability(self.user, f"patientform:{capability}", self.course)

    def is_already_submitted(self):
        if not self.user or not self.user.is_authenticated:
            return False
        if SubmissionTracking.objects.filter(patientform=self.patientform, user=self.user, course=self.course).exists():
            return True
        return Completed.objects.filter(patientform=self.patientform, user=self.user, course=self.course).exists()

    def can_view_analysis(self):
        if self.has_capability('viewreports'):
            return True
        return (self.patientform.publish_stats
                and self.has_capability('viewanalysepage')
                and self.is_already_submitted())

    # --- Analysis ---

    def completions(self, groupid=0):
        completions = Completed.objects.filter(patientform=self.patientform, course=self.course)
        if groupid:
            completions = completions.filter(groups__id=groupid).distinct()
        return completions

    def count_completed_responses(self, groupid=0):
        return self.completions(groupid).count()

    def check_anonymous_count(self, groupid, completedcount):
        """False when group results of an anonymous form would reveal too few respondents."""
        if not self.is_anonymous() or not groupid:
            return True
        return completedcount >= settings.PATIENTFORM_MIN_ANONYMOUS_COUNT_IN_GROUP

    def get_analysis(self, groupid=0):
        completedcount = self.count_completed_responses(groupid)
        items = self.get_items(hasvalueonly=True)
        itemsdata = []
        warnings = []

        if not self.check_anonymous_count(groupid, completedcount):
            warnings.append(insufficient_responses_warning(self.patientform))
        else:
            for item in items:
                handler = get_item_handler(item.typ)
                itemsdata.append({
                    'item': item,
                    'data': handler.get_analysed_for_external(item, groupid),
                })

        return {
            'completedcount': completedcount,
            'itemscount': len(items),
            'itemsdata': itemsdata,
            'warnings': warnings,
        }

    # --- Reports ---

    def get_non_respondents(self, groupid=0, sort='lastaccess', page=0, perpage=0):
        if self.is_anonymous():
            raise AnonymousForm()
        if sort not in NON_RESPONDENT_SORTS:
            sort = 'lastaccess'
        perpage = perpage or settings.PATIENTFORM_DEFAULT_PAGE_COUNT

        respondents = Completed.objects.filter(patientform=self.patientform, course=self.course, user=OuterRef('pk'))
        started = CompletedTmp.objects.filter(patientform=self.patientform, course=self.course, user=OuterRef('pk'))
        users = (users_with_capability(self.course, 'patientform:complete', groupid)
                 .exclude(Exists(respondents))
                 .annotate(started=Exists(started))
                 .order_by(*NON_RESPONDENT_SORTS[sort]))

        total = users.count()
        offset = page * perpage
        return {
            'users': [
                {
                    'courseid': self.course.id,
                    'userid': user.id,
                    'fullname': user.get_full_name() or user.username,
                    'started': user.started,
                }
                for user in users[offset:offset + perpage]
            ],
            'total': total,
        }

    def shuffle_anonym_responses(self):
        """Hand out fresh random response numbers so their order says nothing about who answered."""
        completions = list(Completed.objects.filter(patientform=self.patientform, anonymous_response=True))
        numbers = list(range(1, len(completions) + 1))
        random.shuffle(numbers)
        for completed, number in zip(completions, numbers):
            completed.random_response = number
        Completed.objects.bulk_update(completions, ['random_response'])

    def next_random_response(self):
        last = Completed.objects.filter(patientform=self.patientform).aggregate(last=Max('random_response'))['last']
        return (last or 0) + 1

    def get_responses(self, completed):
        values = {value.item_id: value.value for value in completed.values.all()}
        responses = []
        for item in self.get_items(hasvalueonly=True):
            handler = get_item_handler(item.typ)
            rawval = values.get(item.id, '')
            responses.append({
                'id': item.id,
                'name': handler.get_display_name(item),
                'printval': handler.get_printval(item, rawval),
                'rawval': rawval,
            })
        return responses

    def get_responses_analysis(self, groupid=0, page=0, perpage=0):
        perpage = perpage or settings.PATIENTFORM_DEFAULT_PAGE_COUNT
        offset = page * perpage

        attempts = (self.completions(groupid)
                    .filter(anonymous_response=False, user__isnull=False)
                    .select_related('user')
                    .order_by('timemodified', 'id'))
        anonattempts = self.completions(groupid).filter(anonymous_response=True)
        if anonattempts.exists():
            self.shuffle_anonym_responses()
        anonattempts = anonattempts.order_by('random_response', 'id')

        return {
            'attempts': [
                {
                    'id': completed.id,
                    'courseid': completed.course_id,
                    'userid': completed.user_id,
                    'timemodified': completed.timemodified,
                    'fullname': completed.user.get_full_name() or completed.user.username,
                    'responses': self.get_responses(completed),
                }
                for completed in attempts[offset:offset + perpage]
            ],
            'totalattempts': attempts.count(),
            'anonattempts': [
                {
                    'id': completed.id,
                    'courseid': completed.course_id,
                    'number': completed.random_response,
                    'responses': self.get_responses(completed),
                }
                for completed in anonattempts[offset:offset + perpage]
            ],
            'totalanonattempts': anonattempts.count(),
        }
