from rest_framework import permissions

from courses.permissions import has_capability


class PatientFormCapability(permissions.BasePermission):
    """
    Object-level check of a patient form capability in the form's course.
    Works for the form itself and for anything with a ``patientform`` attribute.
    """
    capability = None

    def has_object_permission(self, request, view, obj):
        patientform = getattr(obj, 'patientform', obj)
        return has_capability(request.user, f"patientform:{self.capability}", patientform.course)


class CanEditItems(PatientFormCapability):
    capability = 'edititems'


class CanViewReports(PatientFormCapability):
    capability = 'viewreports'
