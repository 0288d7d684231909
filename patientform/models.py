# patientform_platform/patientform/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from courses.models import Course, CourseGroup, GroupMode


class PatientForm(models.Model):
    """A survey-style form owned by a course."""

    class Anonymity(models.IntegerChoices):
        YES = 1, "Anonymous"
        NO = 2, "User's name will be logged and shown with answers"

    course = models.ForeignKey(Course, related_name='patientforms', on_delete=models.CASCADE)
    name = models.CharField(max_length=255)
    intro = models.TextField(blank=True)

    anonymous = models.PositiveSmallIntegerField(choices=Anonymity.choices, default=Anonymity.YES)
    multiple_submit = models.BooleanField(default=False)
    autonumbering = models.BooleanField(default=True)
    publish_stats = models.BooleanField(default=False)
    group_mode = models.PositiveSmallIntegerField(choices=GroupMode.choices, default=GroupMode.NONE)

    # Shown (or followed) once an attempt is finalized
    page_after_submit = models.TextField(blank=True)
    site_after_submit = models.CharField(max_length=255, blank=True)

    # Mark the activity complete for the user when they submit
    completion_submit = models.BooleanField(default=False)

    timeopen = models.DateTimeField(null=True, blank=True)
    timeclose = models.DateTimeField(null=True, blank=True)
    timemodified = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def is_anonymous(self):
        return self.anonymous == self.Anonymity.YES

    def is_open(self, now=None):
        now = now or timezone.now()
        if self.timeopen and self.timeopen > now:
            return False
        if self.timeclose and self.timeclose < now:
            return False
        return True


class Item(models.Model):
    """One question (or pseudo item such as a page break) of a patient form."""
    patientform = models.ForeignKey(PatientForm, related_name='items', on_delete=models.CASCADE)
    typ = models.CharField(max_length=255)
    name = models.CharField(max_length=255, blank=True)
    label = models.CharField(max_length=255, blank=True)

    # Type specific encoded configuration, see the item edit forms
    presentation = models.TextField(blank=True)
    hasvalue = models.BooleanField(default=False)
    position = models.PositiveIntegerField(default=0)
    required = models.BooleanField(default=False)

    dependitem = models.ForeignKey('self', null=True, blank=True, on_delete=models.SET_NULL, related_name='dependants')
    dependvalue = models.CharField(max_length=255, blank=True)
    options = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self):
        return f"{self.typ}: {self.name or self.pk}"


class CompletedTmp(models.Model):
    """An in-progress, resumable attempt (one per form, user and course)."""
    patientform = models.ForeignKey(PatientForm, related_name='attempts_in_progress', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.CASCADE, related_name='patientform_attempts')
    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    anonymous_response = models.BooleanField(default=False)
    timemodified = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('patientform', 'user', 'course')

    def __str__(self):
        return f"Attempt in progress {self.pk} on {self.patientform}"


class ValueTmp(models.Model):
    completed = models.ForeignKey(CompletedTmp, related_name='values', on_delete=models.CASCADE)
    item = models.ForeignKey(Item, related_name='values_tmp', on_delete=models.CASCADE)
    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    value = models.TextField(blank=True)

    class Meta:
        unique_together = ('completed', 'item')


class Completed(models.Model):
    """
    A finalized attempt. Immutable once written, only deleted by a teacher.
    Anonymous attempts keep no user, just a response number.
    """
    patientform = models.ForeignKey(PatientForm, related_name='completions', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='patientform_completions')
    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    anonymous_response = models.BooleanField(default=False)
    random_response = models.PositiveIntegerField(default=0)

    # Groups of the respondent at submit time, used for group filtered reports
    groups = models.ManyToManyField(CourseGroup, blank=True, related_name='patientform_completions')
    timemodified = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['timemodified', 'id']

    def __str__(self):
        return f"Completed {self.pk} on {self.patientform}"


class Value(models.Model):
    completed = models.ForeignKey(Completed, related_name='values', on_delete=models.CASCADE)
    item = models.ForeignKey(Item, related_name='values', on_delete=models.CASCADE)
    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    value = models.TextField(blank=True)

    class Meta:
        unique_together = ('completed', 'item')


class SubmissionTracking(models.Model):
    """Remembers that a user submitted, without pointing at which record is theirs."""
    patientform = models.ForeignKey(PatientForm, related_name='trackings', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    timecreated = models.DateTimeField(auto_now_add=True)


class ActivityCompletion(models.Model):
    patientform = models.ForeignKey(PatientForm, related_name='activity_completions', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    viewed = models.BooleanField(default=False)
    completed = models.BooleanField(default=False)
    timemodified = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('patientform', 'user')
