from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from engine.aggregator import priority_distribution, status_distribution
from task.repository import RepositoryError, TaskRepository
from taskflow.jwt_auth import CookieJWTAuthentication
from utils.clock import today_for
from utils.repository_response import repository_unavailable


def _open_project_tasks():
    # Include only tasks whose project is NOT completed
    repository = TaskRepository()
    return repository.to_records(repository.queryset().exclude(project__status='completed'))


class TaskStatusDistribution(APIView):
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]

    def get(self, request):
        today = today_for(request)
        try:
            tasks = _open_project_tasks()
        except RepositoryError as e:
            return repository_unavailable(e, 'TaskStatusDistribution')

        distribution = status_distribution(tasks, today)
        return Response({
            "status_distribution": [
                {"display_status": key, "count": count} for key, count in distribution.items()
            ]
        })


class TaskPriorityDistribution(APIView):
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]

    def get(self, request):
        try:
            tasks = _open_project_tasks()
        except RepositoryError as e:
            return repository_unavailable(e, 'TaskPriorityDistribution')

        distribution = priority_distribution(tasks)
        return Response({
            "priority_distribution": [
                {"priority": key, "count": count} for key, count in distribution.items()
            ]
        })
