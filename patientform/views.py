import logging

from rest_framework import viewsets, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django.shortcuts import get_object_or_404

from courses.models import GroupMode
from courses.permissions import (
    CAPABILITIES, IsEnrolledOrStaff, groups_group_visible, get_activity_group, has_capability,
)
from cores.models import AuditLog

from .completion import PatientFormCompletion
from .exceptions import AccessDenied, AnonymousForm, NotCompletedYet, NotInGroup, NotOpenError, NotStarted
from .items import get_item_handler
from .items.base import renumber
from .models import PatientForm, Item, Completed, ActivityCompletion, SubmissionTracking
from .permissions import CanEditItems, CanViewReports
from .serializers import (
    PatientFormSerializer, PatientFormSummarySerializer, ItemExporter, ItemCreateSerializer,
    CompletedTmpExporter, CompletedExporter, ValueTmpExporter, ValueExporter, ProcessPageSerializer,
)

logger = logging.getLogger(__name__)


def int_param(request, name, default=0):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


class PatientFormViewSet(viewsets.ModelViewSet):
    """
    Patient forms and everything a participant or teacher does with one.
    Editing the form itself needs the edititems capability in its course.
    """
    queryset = PatientForm.objects.select_related('course').order_by('course_id', 'id')

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if not user.is_staff:
            queryset = queryset.filter(course__enrolments__user=user).distinct()

        # ?courseids=1,2
        courseids = self.request.query_params.get('courseids')
        if courseids:
            ids = [int(each) for each in courseids.split(',') if each.strip().isdigit()]
            queryset = queryset.filter(course_id__in=ids)
        return queryset

    def get_serializer_class(self):
        if self.action in ['list', 'retrieve']:
            return PatientFormSummarySerializer
        return PatientFormSerializer

    def get_permissions(self):
        if self.action in ['update', 'partial_update', 'destroy']:
            return [permissions.IsAuthenticated(), CanEditItems()]
        if self.action in ['non_respondents', 'responses_analysis']:
            return [permissions.IsAuthenticated(), CanViewReports()]
        return [permissions.IsAuthenticated(), IsEnrolledOrStaff()]

    def perform_create(self, serializer):
        course = serializer.validated_data['course']
        if not has_capability(self.request.user, 'patientform:edititems', course):
            raise AccessDenied()
        patientform = serializer.save()
        AuditLog.objects.create(
            actor=self.request.user,
            action='CREATE',
            target_model='PatientForm',
            target_object_id=str(patientform.id),
            details=f"Created patient form: {patientform.name}"
        )

    def perform_update(self, serializer):
        patientform = serializer.save()
        AuditLog.objects.create(
            actor=self.request.user,
            action='UPDATE',
            target_model='PatientForm',
            target_object_id=str(patientform.id),
            details=f"Updated patient form: {patientform.name}"
        )

    def perform_destroy(self, instance):
        AuditLog.objects.create(
            actor=self.request.user,
            action='DELETE',
            target_model='PatientForm',
            target_object_id=str(instance.id),
            details=f"Deleted patient form: {instance.name}"
        )
        instance.delete()

    # --- Helpers ---

    def get_completion(self, patientform):
        return PatientFormCompletion(patientform, self.request.user, remoteip=self.request.META.get('REMOTE_ADDR'))

    def get_groupid(self, patientform):
        """Requested group, or the user's default group when the form uses groups."""
        groupid = int_param(self.request, 'groupid')
        if groupid:
            if not groups_group_visible(groupid, patientform.course, patientform.group_mode, self.request.user):
                raise NotInGroup()
            return groupid
        if patientform.group_mode != GroupMode.NONE:
            groupid = get_activity_group(self.request.user, patientform.course, patientform.group_mode)
            if not groups_group_visible(groupid, patientform.course, patientform.group_mode, self.request.user):
                raise NotInGroup()
            return groupid
        return 0

    # --- Participant actions ---

    @action(detail=True, methods=['get'], url_path='access')
    def access(self, request, pk=None):
        completion = self.get_completion(self.get_object())
        return Response({
            'canviewanalysis': completion.can_view_analysis(),
            'cancomplete': completion.can_complete(),
            'cansubmit': completion.can_submit(),
            'candeletesubmissions': completion.has_capability('deletesubmissions'),
            'canviewreports': completion.has_capability('viewreports'),
            'canedititems': completion.has_capability('edititems'),
            'isempty': completion.is_empty(),
            'isopen': completion.is_open(),
            'isalreadysubmitted': completion.is_already_submitted(),
            'isanonymous': completion.is_anonymous(),
            'warnings': [],
        })

    @action(detail=True, methods=['post'], url_path='view')
    def mark_viewed(self, request, pk=None):
        self.get_completion(self.get_object()).set_module_viewed()
        return Response({'status': True, 'warnings': []})

    @action(detail=True, methods=['get'], url_path='attempt')
    def attempt(self, request, pk=None):
        completedtmp = self.get_completion(self.get_object()).get_current_completed_tmp()
        if completedtmp is None:
            raise NotStarted()
        return Response({'attempt': CompletedTmpExporter(completedtmp).data, 'warnings': []})

    @action(detail=True, methods=['get'], url_path='items')
    def items(self, request, pk=None):
        completion = self.get_completion(self.get_object())
        return Response({
            'items': ItemExporter(completion.get_items(), many=True).data,
            'warnings': [],
        })

    @action(detail=True, methods=['post'], url_path='launch')
    def launch(self, request, pk=None):
        """Start or resume an attempt and tell the client which page to show."""
        completion = self.get_completion(self.get_object())
        completion.open_or_resume()
        gopage = completion.get_resume_page()
        return Response({'gopage': -1 if gopage is None else gopage, 'warnings': []})

    @action(detail=True, methods=['get', 'post'], url_path=r'pages/(?P<page>\d+)')
    def page_items(self, request, pk=None, page=None):
        patientform = self.get_object()
        completion = self.get_completion(patientform)
        page = int(page)

        if request.method == 'GET':
            if not completion.can_complete():
                raise AccessDenied()
            if not completion.is_open():
                raise NotOpenError()
            items = completion.get_page(page)
            pagecount = len(completion.get_pages())
            return Response({
                'items': ItemExporter(items, many=True).data,
                # Until this page is answered the next page cannot be known for sure
                'hasnextpage': page < pagecount - 1,
                'hasprevpage': bool(page) and completion.get_previous_page(page) is not None,
                'warnings': [],
            })

        serializer = ProcessPageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = completion.process_page(
            page,
            serializer.validated_data['responses'],
            serializer.validated_data['goprevious'],
        )
        return Response({
            'jumpto': result.jumpto,
            'completed': result.completed,
            'completionpagecontents': completion.post_submit_content() if result.completed else '',
            'siteaftersubmit': completion.post_submit_redirect() if result.completed else '',
            'warnings': result.errors,
        })

    @action(detail=True, methods=['get'], url_path='analysis')
    def analysis(self, request, pk=None):
        patientform = self.get_object()
        completion = self.get_completion(patientform)
        if not completion.can_view_analysis():
            raise AccessDenied()

        analysis = completion.get_analysis(self.get_groupid(patientform))
        return Response({
            'completedcount': analysis['completedcount'],
            'itemscount': analysis['itemscount'],
            'itemsdata': [
                {'item': ItemExporter(row['item']).data, 'data': row['data']}
                for row in analysis['itemsdata']
            ],
            'warnings': analysis['warnings'],
        })

    @action(detail=True, methods=['get'], url_path='responses/unfinished')
    def unfinished_responses(self, request, pk=None):
        completion = self.get_completion(self.get_object())
        return Response({
            'responses': ValueTmpExporter(completion.get_unfinished_responses(), many=True).data,
            'warnings': [],
        })

    @action(detail=True, methods=['get'], url_path='responses/finished')
    def finished_responses(self, request, pk=None):
        completion = self.get_completion(self.get_object())
        return Response({
            'responses': ValueExporter(completion.get_finished_responses(), many=True).data,
            'warnings': [],
        })

    @action(detail=True, methods=['get'], url_path='last-completed')
    def last_completed(self, request, pk=None):
        completion = self.get_completion(self.get_object())
        if completion.is_anonymous():
            raise AnonymousForm()
        completed = completion.find_last_completed()
        if completed is None:
            raise NotCompletedYet()
        return Response({'completed': CompletedExporter(completed).data, 'warnings': []})

    # --- Teacher reports ---

    @action(detail=True, methods=['get'], url_path='non-respondents')
    def non_respondents(self, request, pk=None):
        patientform = self.get_object()
        completion = self.get_completion(patientform)
        result = completion.get_non_respondents(
            groupid=self.get_groupid(patientform),
            sort=request.query_params.get('sort', 'lastaccess'),
            page=int_param(request, 'page'),
            perpage=int_param(request, 'perpage'),
        )
        result['warnings'] = []
        return Response(result)

    @action(detail=True, methods=['get'], url_path='responses/analysis')
    def responses_analysis(self, request, pk=None):
        patientform = self.get_object()
        completion = self.get_completion(patientform)
        result = completion.get_responses_analysis(
            groupid=self.get_groupid(patientform),
            page=int_param(request, 'page'),
            perpage=int_param(request, 'perpage'),
        )
        result['warnings'] = []
        return Response(result)

    @action(detail=True, methods=['delete'], url_path=r'completed/(?P<completed_id>\d+)')
    def delete_completed(self, request, pk=None, completed_id=None):
        patientform = self.get_object()
        if not has_capability(request.user, 'patientform:deletesubmissions', patientform.course):
            raise AccessDenied()
        completed = get_object_or_404(Completed, id=completed_id, patientform=patientform)

        if completed.user_id:
            SubmissionTracking.objects.filter(
                patientform=patientform, user_id=completed.user_id, course=completed.course
            ).delete()
            ActivityCompletion.objects.filter(patientform=patientform, user_id=completed.user_id).update(completed=False)
        completed.delete()

        logger.info(f"Completed {completed_id} of patient form {patientform.id} deleted by user {request.user.id}")
        AuditLog.objects.create(
            actor=request.user,
            action='DELETE',
            target_model='Completed',
            target_object_id=str(completed_id),
            details=f"Deleted a submission of patient form: {patientform.name}"
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ItemViewSet(viewsets.ModelViewSet):
    """
    Item editing. The payload of create/update is the item type's edit form,
    ``definition`` returns that form's fields filled with the current values.
    """
    queryset = Item.objects.select_related('patientform__course').order_by('patientform_id', 'position', 'id')
    serializer_class = ItemExporter
    permission_classes = [permissions.IsAuthenticated, CanEditItems]

    def get_queryset(self):
        queryset = super().get_queryset()
        # Filter by form if provided ?patientform=1
        patientform_id = self.request.query_params.get('patientform')
        if patientform_id:
            queryset = queryset.filter(patientform_id=patientform_id)
        if not self.request.user.is_staff:
            queryset = queryset.filter(
                patientform__course__enrolments__user=self.request.user,
                patientform__course__enrolments__role__in=CAPABILITIES['patientform:edititems'],
            ).distinct()
        return queryset

    def get_new_item_context(self, data):
        serializer = ItemCreateSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        patientform = serializer.validated_data['patientform']
        if not has_capability(self.request.user, 'patientform:edititems', patientform.course):
            raise AccessDenied()
        return patientform, get_item_handler(serializer.validated_data['typ'])

    def create(self, request, *args, **kwargs):
        patientform, handler = self.get_new_item_context(request.data)
        form = handler.build_editform(None, patientform, data=request.data)
        form.is_valid(raise_exception=True)
        item = handler.save_item(form)
        AuditLog.objects.create(
            actor=request.user,
            action='CREATE',
            target_model='Item',
            target_object_id=str(item.id),
            details=f"Added a {item.typ} item to patient form: {patientform.name}"
        )
        return Response(ItemExporter(item).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        item = self.get_object()
        handler = get_item_handler(item.typ)
        form = handler.build_editform(item, item.patientform, data=request.data)
        form.is_valid(raise_exception=True)
        item = handler.save_item(form)
        AuditLog.objects.create(
            actor=request.user,
            action='UPDATE',
            target_model='Item',
            target_object_id=str(item.id),
            details=f"Updated item {item.id} of patient form: {item.patientform.name}"
        )
        return Response(ItemExporter(item).data)

    def perform_destroy(self, instance):
        patientform = instance.patientform
        AuditLog.objects.create(
            actor=self.request.user,
            action='DELETE',
            target_model='Item',
            target_object_id=str(instance.id),
            details=f"Deleted item {instance.id} of patient form: {patientform.name}"
        )
        instance.delete()
        renumber(list(patientform.items.order_by('position', 'id')))

    @action(detail=True, methods=['get'], url_path='definition')
    def definition(self, request, pk=None):
        item = self.get_object()
        form = get_item_handler(item.typ).build_editform(item, item.patientform)
        return Response({'typ': item.typ, 'fields': form.definition()})

    @action(detail=False, methods=['get'], url_path='new-definition')
    def new_definition(self, request):
        """Empty edit form for ?patientform=<id>&typ=<type>."""
        patientform, handler = self.get_new_item_context(request.query_params)
        form = handler.build_editform(None, patientform)
        return Response({'typ': handler.type, 'fields': form.definition()})
