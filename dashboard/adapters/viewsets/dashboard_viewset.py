from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from engine import aggregate, layout
from engine.aggregator import overdue_trend
from task.repository import RepositoryError, TaskRepository
from taskflow.jwt_auth import CookieJWTAuthentication
from utils.clock import today_for
from utils.repository_response import repository_unavailable
from ..serializers.stats_serializer import (
    PortfolioStatsSerializer,
    ProjectStatsSerializer,
    TimelineSerializer,
)

AS_OF = OpenApiParameter('as_of', str, description='Reference date (YYYY-MM-DD), defaults to today')
PROJECT = OpenApiParameter('project', int, description='Restrict to one project')


class DashboardViewset(viewsets.ViewSet):
    """
    Portfolio dashboard over all active tasks.

    Every figure in one response is computed from a single snapshot of the
    task set against a single reference date.
    """
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]
    repository_class = TaskRepository

    def _tasks(self, request):
        project = request.query_params.get('project') or None
        if project is not None and not project.isdigit():
            raise ValidationError({'project': f"Invalid project id '{project}'"})
        return self.repository_class().active_tasks(project_id=project)

    def _unavailable(self, error):
        return repository_unavailable(error, type(self).__name__)

    @extend_schema(parameters=[AS_OF])
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Portfolio totals, per-project stats and the overdue trend."""
        today = today_for(request)
        try:
            tasks = self.repository_class().active_tasks()
        except RepositoryError as e:
            return self._unavailable(e)

        result = aggregate(tasks, today)
        return Response({
            'as_of': today.isoformat(),
            'portfolio': PortfolioStatsSerializer(result.portfolio).data,
            'projects': ProjectStatsSerializer(list(result.per_project.values()), many=True).data,
            'overdue_trend': overdue_trend(tasks, today),
        })

    @extend_schema(parameters=[AS_OF, PROJECT], responses={200: TimelineSerializer})
    @action(detail=False, methods=['get'])
    def timeline(self, request):
        today = today_for(request)
        try:
            tasks = self._tasks(request)
        except RepositoryError as e:
            return self._unavailable(e)
        return Response(TimelineSerializer(layout(tasks, today)).data)
