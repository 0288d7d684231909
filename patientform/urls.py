from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PatientFormViewSet, ItemViewSet

router = DefaultRouter()
router.register(r'patientforms', PatientFormViewSet, basename='patientforms')
router.register(r'items', ItemViewSet, basename='items')

urlpatterns = [
    path('', include(router.urls)),
]
