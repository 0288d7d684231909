# patientform_platform/courses/models.py
from django.conf import settings
from django.db import models


class CourseCategory(models.Model):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = 'course categories'

    def __str__(self):
        return self.name


class Course(models.Model):
    fullname = models.CharField(max_length=254)
    shortname = models.CharField(max_length=100, unique=True)
    summary = models.TextField(blank=True)
    category = models.ForeignKey(CourseCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='courses')

    # Hidden courses are only listed for staff
    visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.fullname


class CourseGroup(models.Model):
    course = models.ForeignKey(Course, related_name='groups', on_delete=models.CASCADE)
    name = models.CharField(max_length=254)
    description = models.TextField(blank=True)
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name='course_groups', blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.course.shortname}: {self.name}"


class Enrolment(models.Model):
    """A user's membership of a course, with the role they hold inside it."""

    class Role(models.TextChoices):
        STUDENT = "student", "Student"
        TEACHER = "teacher", "Non-editing teacher"
        EDITING_TEACHER = "editingteacher", "Teacher"
        MANAGER = "manager", "Manager"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='enrolments', on_delete=models.CASCADE)
    course = models.ForeignKey(Course, related_name='enrolments', on_delete=models.CASCADE)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'course')

    def __str__(self):
        return f"{self.user} - {self.course.shortname} ({self.role})"


class GroupMode(models.IntegerChoices):
    NONE = 0, "No groups"
    SEPARATE = 1, "Separate groups"
    VISIBLE = 2, "Visible groups"
