# patientform_platform/courses/serializers.py
from rest_framework import serializers
from .models import Course, CourseCategory, CourseGroup


class CourseCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = CourseCategory
        fields = '__all__'


class CourseSerializer(serializers.ModelSerializer):
    # Category shown by name, the way the search block prints it
    category = serializers.CharField(source='category.name', read_only=True, default='')

    class Meta:
        model = Course
        fields = ['id', 'fullname', 'shortname', 'summary', 'category', 'visible']


class CourseGroupSerializer(serializers.ModelSerializer):
    member_count = serializers.IntegerField(source='members.count', read_only=True)

    class Meta:
        model = CourseGroup
        fields = ['id', 'course', 'name', 'description', 'member_count']
