from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Users, authentication and dashboard ---
    path('api/', include('users.urls')),

    # --- Courses and course search ---
    path('api/', include('courses.urls')),

    # --- Patient forms ---
    path('api/', include('patientform.urls')),
    path('api/', include('patientrecord.urls')),

    # --- Platform settings and audit log ---
    path('api/core/', include('cores.urls')),
]
