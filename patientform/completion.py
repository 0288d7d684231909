"""
Walks one user through a patient form page by page.

Answers are kept in a CompletedTmp until the last page is submitted, then
moved into a Completed record in a single transaction.
"""
import logging
from collections import namedtuple

from django.db import transaction
from django.utils import timezone

from courses.permissions import get_user_groups

from .complete_form import CompleteForm
from .exceptions import (
    AccessDenied, AlreadySubmitted, EmptyFormError, InvalidPage, NotOpenError, NotStarted, make_warning,
)
from .items import get_item_handler
from .models import ActivityCompletion, Completed, CompletedTmp, SubmissionTracking, Value, ValueTmp
from .responses import parse_responses
from .structure import PatientFormStructure

logger = logging.getLogger(__name__)

PageResult = namedtuple('PageResult', ['jumpto', 'completed', 'errors'])


class PatientFormCompletion(PatientFormStructure):

    def __init__(self, patientform, user, now=None, remoteip=None):
        super().__init__(patientform, user=user, now=now)
        self.remoteip = remoteip
        self.jumpto = None
        self.completed = None
        self._completedtmp = None

    # --- Permissions and state ---

    def can_complete(self):
        return self.has_capability('complete')

    def can_submit(self):
        return bool(self.patientform.multiple_submit) or not self.is_already_submitted()

    def set_module_viewed(self):
        completion, _ = ActivityCompletion.objects.get_or_create(patientform=self.patientform, user=self.user)
        if not completion.viewed:
            completion.viewed = True
            completion.save(update_fields=['viewed', 'timemodified'])
        return completion

    def get_current_completed_tmp(self):
        if self._completedtmp is None:
            self._completedtmp = CompletedTmp.objects.filter(
                patientform=self.patientform, user=self.user, course=self.course,
            ).first()
        return self._completedtmp

    def check_can_complete(self):
        if not self.can_complete():
            raise AccessDenied()
        if not self.is_open():
            raise NotOpenError()
        if self.is_empty():
            raise EmptyFormError()
        if not self.can_submit():
            raise AlreadySubmitted()

    def require_completed_tmp(self):
        """The attempt started by open_or_resume(); pages cannot be posted without one."""
        completedtmp = self.get_current_completed_tmp()
        if completedtmp is None:
            if self.is_already_submitted():
                raise AlreadySubmitted()
            raise NotStarted()
        return completedtmp

    def open_or_resume(self):
        """Load the attempt in progress or start a new one."""
        self.check_can_complete()
        completedtmp = self.get_current_completed_tmp()
        if completedtmp is None:
            completedtmp, _ = CompletedTmp.objects.get_or_create(
                patientform=self.patientform, user=self.user, course=self.course,
                defaults={'anonymous_response': self.is_anonymous()},
            )
            self._completedtmp = completedtmp
        return completedtmp

    def get_values_tmp(self):
        completedtmp = self.get_current_completed_tmp()
        if completedtmp is None:
            return {}
        return dict(ValueTmp.objects.filter(completed=completedtmp).values_list('item_id', 'value'))

    # --- Pages ---

    def dependency_has_error(self, item):
        """The item depends on something that is not on an earlier page."""
        if not item.dependitem_id:
            return False
        itemids = [each.id for each in self.get_items()]
        if item.dependitem_id not in itemids:
            return True
        index1 = itemids.index(item.dependitem_id)
        index2 = itemids.index(item.id)
        if index1 >= index2:
            return True
        items = self.get_items()
        for each in items[index1 + 1:index2]:
            if each.typ == 'pagebreak':
                return False
        return True

    def can_see_item(self, item, values=None):
        """True or False from the stored answers, None when the dependency is broken."""
        if not item.dependitem_id:
            return True
        if self.dependency_has_error(item):
            return None
        values = self.get_values_tmp() if values is None else values
        if item.dependitem_id not in values:
            return False
        dependitem = next(each for each in self.get_items() if each.id == item.dependitem_id)
        handler = get_item_handler(dependitem.typ)
        return bool(handler.compare_value(dependitem, values[item.dependitem_id], item.dependvalue))

    def get_pages(self):
        """Items split at page breaks, leaving out what the user cannot see right now."""
        values = self.get_values_tmp()
        pages = [[]]
        for item in self.get_items():
            if item.typ == 'pagebreak':
                pages.append([])
                continue
            if not get_item_handler(item.typ).can_display(item):
                continue
            if self.can_see_item(item, values) is not False:
                pages[-1].append(item)
        return pages

    def get_page(self, page):
        pages = self.get_pages()
        if page < 0 or page >= len(pages):
            raise InvalidPage()
        return pages[page]

    def get_next_page(self, page, peek_only=True):
        pages = self.get_pages()
        for pagenum in range(page + 1, len(pages)):
            if pages[pagenum]:
                if not peek_only:
                    self.jumpto = pagenum
                return pagenum
        return None

    def get_previous_page(self, page, peek_only=True):
        if not page:
            return None
        pages = self.get_pages()
        for pagenum in range(min(page, len(pages)) - 1, -1, -1):
            if pages[pagenum]:
                if not peek_only:
                    self.jumpto = pagenum
                return pagenum
        return None

    def get_resume_page(self):
        """First page with an unanswered question, else the last page."""
        values = self.get_values_tmp()
        lastpage = None
        for pagenum, items in enumerate(self.get_pages()):
            if not items:
                continue
            lastpage = pagenum
            for item in items:
                if item.hasvalue and item.id not in values:
                    return pagenum
        return lastpage

    def get_page_form(self, page):
        return CompleteForm(self.get_page(page), remoteip=self.remoteip)

    # --- Submitting ---

    def save_response_tmp(self, items, values):
        with transaction.atomic():
            completedtmp = self.require_completed_tmp()
            completedtmp = CompletedTmp.objects.select_for_update().filter(pk=completedtmp.pk).first()
            if completedtmp is None:
                raise AlreadySubmitted()

            for item in items:
                if not item.hasvalue:
                    continue
                handler = get_item_handler(item.typ)
                ValueTmp.objects.update_or_create(
                    completed=completedtmp, item=item,
                    defaults={
                        'course': self.course,
                        'value': handler.create_value(values.get(handler.response_name(item))),
                    },
                )
            completedtmp.save()
        self._completedtmp = completedtmp
        return completedtmp

    def process_page(self, page, responses, goprevious=False):
        """
        Store the answers posted for ``page`` and work out where to go next.
        The last page finalizes the attempt.
        """
        self.check_can_complete()
        self.require_completed_tmp()
        form = self.get_page_form(page)
        items = form.items
        values = parse_responses(responses)

        if goprevious:
            self.save_response_tmp(items, values)
            previous = self.get_previous_page(page, peek_only=False)
            self.jumpto = previous or 0
            return PageResult(self.jumpto, False, [])

        errors = form.validate(values)
        if errors:
            self.jumpto = page
            warnings = [
                make_warning(name, (form.get_form_element(name) or {}).get('itemid'), 'invalidvalue', message)
                for name, message in errors.items()
            ]
            return PageResult(page, False, warnings)

        self.save_response_tmp(items, values)
        nextpage = self.get_next_page(page, peek_only=False)
        if nextpage is None:
            missing = self.get_unanswered_required(page)
            if missing:
                missingpage, item = missing
                self.jumpto = missingpage
                name = get_item_handler(item.typ).response_name(item)
                return PageResult(missingpage, False, [make_warning(name, item.id, 'invalidvalue', 'Required')])
            self.finalize()
            self.jumpto = 0
            return PageResult(0, True, [])
        return PageResult(nextpage, False, [])

    def get_unanswered_required(self, page):
        """First (page, item) before ``page`` whose required answer was never stored."""
        values = self.get_values_tmp()
        for pagenum, items in enumerate(self.get_pages()[:page]):
            for item in items:
                if item.required and item.hasvalue and item.id not in values:
                    return pagenum, item
        return None

    def finalize(self):
        """Turn the attempt in progress into a Completed record."""
        completedtmp = self.get_current_completed_tmp()
        if completedtmp is None:
            raise AlreadySubmitted()

        with transaction.atomic():
            completedtmp = CompletedTmp.objects.select_for_update().filter(pk=completedtmp.pk).first()
            if completedtmp is None or not self.can_submit():
                raise AlreadySubmitted()

            anonymous = self.is_anonymous()
            completed = Completed.objects.create(
                patientform=self.patientform,
                user=None if anonymous else self.user,
                course=self.course,
                anonymous_response=anonymous,
                random_response=self.next_random_response() if anonymous else 0,
                timemodified=self.now or timezone.now(),
            )
            Value.objects.bulk_create([
                Value(completed=completed, item_id=valuetmp.item_id, course=self.course, value=valuetmp.value)
                for valuetmp in completedtmp.values.all()
            ])
            completed.groups.set(get_user_groups(self.user, self.course))
            SubmissionTracking.objects.create(patientform=self.patientform, user=self.user, course=self.course)

            if self.patientform.completion_submit:
                ActivityCompletion.objects.update_or_create(
                    patientform=self.patientform, user=self.user, defaults={'completed': True},
                )
            completedtmp.delete()

        logger.info(f"Patient form {self.patientform.id} submitted as completed {completed.id}")
        self._completedtmp = None
        self.completed = completed
        return completed

    def post_submit_content(self):
        return self.patientform.page_after_submit

    def post_submit_redirect(self):
        return self.patientform.site_after_submit

    # --- Responses ---

    def find_last_completed(self):
        """Latest finalized attempt of the user, never exposed for anonymous forms."""
        if self.is_anonymous():
            return None
        return (Completed.objects
                .filter(patientform=self.patientform, user=self.user, course=self.course)
                .order_by('-timemodified', '-id')
                .first())

    def get_unfinished_responses(self):
        completedtmp = self.get_current_completed_tmp()
        if completedtmp is None:
            return ValueTmp.objects.none()
        return ValueTmp.objects.filter(completed=completedtmp).select_related('item')

    def get_finished_responses(self):
        completed = self.find_last_completed()
        if completed is None:
            return Value.objects.none()
        return Value.objects.filter(completed=completed).select_related('item')
