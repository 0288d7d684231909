from django.contrib import admin

from .models import Course, CourseCategory, CourseGroup, Enrolment

admin.site.register(Course)
admin.site.register(CourseCategory)
admin.site.register(CourseGroup)
admin.site.register(Enrolment)
