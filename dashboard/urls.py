from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .adapters.viewsets.dashboard_viewset import DashboardViewset
from .adapters.viewsets.dashboard_distribution_viewset import (
    TaskStatusDistribution,
    TaskPriorityDistribution,
)
from .adapters.viewsets.dashboard_due_tasks_viewset import DueTasksView

router = DefaultRouter()
router.register(r'dashboard', DashboardViewset, basename='dashboard')

urlpatterns = [
    path('', include(router.urls)),
    path('dashboard/task-status-distribution/', TaskStatusDistribution.as_view(), name='task-status-distribution'),
    path('dashboard/task-priority-distribution/', TaskPriorityDistribution.as_view(), name='task-priority-distribution'),
    path('dashboard/due-tasks/', DueTasksView.as_view(), name='due-tasks'),
]
