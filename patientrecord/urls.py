from django.urls import path
from .views import PatientRecordView

urlpatterns = [
    path('patientrecord/', PatientRecordView.as_view(), name='patient-record'),
]
