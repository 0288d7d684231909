from rest_framework import viewsets, permissions, filters
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Course, CourseCategory
from .permissions import has_capability, get_user_groups
from .serializers import CourseSerializer, CourseCategorySerializer, CourseGroupSerializer


class CourseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Course search. Searches full name, short name, summary and category.
    Hidden courses are only returned to staff.
    """
    serializer_class = CourseSerializer
    permission_classes = [permissions.IsAuthenticated]

    filter_backends = [filters.SearchFilter]
    search_fields = ['fullname', 'shortname', 'summary', 'category__name']

    def get_queryset(self):
        queryset = Course.objects.select_related('category').order_by('fullname')
        if not self.request.user.is_staff:
            queryset = queryset.filter(visible=True)
        category_id = self.request.query_params.get('category')
        if category_id:
            queryset = queryset.filter(category_id=category_id)
        return queryset

    @action(detail=True, methods=['get'])
    def groups(self, request, pk=None):
        """Groups of the course the user is allowed to see."""
        course = self.get_object()
        if has_capability(request.user, 'course:accessallgroups', course):
            groups = course.groups.all()
        else:
            groups = get_user_groups(request.user, course)
        serializer = CourseGroupSerializer(groups, many=True)
        return Response({"groups": serializer.data})


class CategoryViewSet(viewsets.ModelViewSet):
    queryset = CourseCategory.objects.all().order_by('name')
    serializer_class = CourseCategorySerializer
    permission_classes = [permissions.IsAdminUser]
