from rest_framework.routers import DefaultRouter

from .views import EmployeeViewSet, PayrollEntryViewSet

router = DefaultRouter()
router.register('employees', EmployeeViewSet, basename='employees')
router.register('entries', PayrollEntryViewSet, basename='payroll-entries')

urlpatterns = router.urls
