from django.contrib.auth import get_user_model
from rest_framework import permissions

from .models import CourseGroup, Enrolment, GroupMode

User = get_user_model()
Role = Enrolment.Role

# Course roles granted each capability. Site staff bypass this table.
CAPABILITIES = {
    'patientform:complete': {Role.STUDENT},
    'patientform:viewanalysepage': {Role.STUDENT, Role.TEACHER, Role.EDITING_TEACHER, Role.MANAGER},
    'patientform:viewreports': {Role.TEACHER, Role.EDITING_TEACHER, Role.MANAGER},
    'patientform:edititems': {Role.EDITING_TEACHER, Role.MANAGER},
    'patientform:deletesubmissions': {Role.EDITING_TEACHER, Role.MANAGER},
    'course:accessallgroups': {Role.TEACHER, Role.EDITING_TEACHER, Role.MANAGER},
}


def get_course_role(user, course):
    if not user or not user.is_authenticated:
        return None
    return Enrolment.objects.filter(user=user, course=course).values_list('role', flat=True).first()


def has_capability(user, capability, course):
    if capability not in CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")
    if not user or not user.is_authenticated:
        return False
    if user.is_staff:
        return True
    return get_course_role(user, course) in CAPABILITIES[capability]


def users_with_capability(course, capability, groupid=0):
    """Enrolled users whose course role grants ``capability``, optionally limited to a group."""
    users = User.objects.filter(
        enrolments__course=course,
        enrolments__role__in=CAPABILITIES[capability],
        is_active=True,
    )
    if groupid:
        users = users.filter(course_groups__id=groupid)
    return users.distinct()


def groups_group_visible(groupid, course, group_mode, user):
    if groupid and not CourseGroup.objects.filter(id=groupid, course=course).exists():
        return False
    if group_mode in (GroupMode.NONE, GroupMode.VISIBLE):
        return True
    if has_capability(user, 'course:accessallgroups', course):
        return True
    if groupid:
        return CourseGroup.objects.filter(id=groupid, members=user).exists()
    return False


def get_activity_group(user, course, group_mode):
    """Default group of ``user`` for an activity, 0 meaning all participants."""
    if group_mode == GroupMode.NONE:
        return 0
    if has_capability(user, 'course:accessallgroups', course):
        return 0
    group = CourseGroup.objects.filter(course=course, members=user).order_by('name', 'id').first()
    return group.id if group else 0


def get_user_groups(user, course):
    if not user or not user.is_authenticated:
        return CourseGroup.objects.none()
    return CourseGroup.objects.filter(course=course, members=user)


class IsEnrolledOrStaff(permissions.BasePermission):
    """
    Object-level check for anything that hangs off a course.
    The object must expose a ``course`` attribute (or be the course).
    """
    def has_object_permission(self, request, view, obj):
        course = getattr(obj, 'course', obj)
        if request.user.is_staff:
            return True
        return Enrolment.objects.filter(user=request.user, course=course).exists()
