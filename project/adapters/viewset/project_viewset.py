from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.adapters.serializers.stats_serializer import ProjectStatsSerializer, TimelineSerializer
from engine import aggregate, layout
from engine.aggregator import project_stats
from project.adapters.serializers.project_serializer import ProjectSerializer
from project.models import Project
from task.repository import RepositoryError, TaskRepository
from taskflow.jwt_auth import CookieJWTAuthentication
from utils.clock import today_for
from utils.repository_response import repository_unavailable
from utils.custom_paginator import CustomPaginator


class ProjectViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Projects API with:
    - cookie JWT auth
    - list filtering/search/ordering
    - per-project stats and timeline computed from the active tasks
    """
    queryset = Project.objects.all()
    serializer_class = ProjectSerializer
    pagination_class = CustomPaginator
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status"]
    search_fields = ["name", "description"]
    ordering_fields = ["due_date", "created_at", "name"]
    authentication_classes = [CookieJWTAuthentication]
    repository_class = TaskRepository

    def _unavailable(self, error):
        return repository_unavailable(error, type(self).__name__)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        projects = page if page is not None else list(queryset)

        try:
            tasks = self.repository_class().active_tasks()
        except RepositoryError as e:
            return self._unavailable(e)

        per_project = aggregate(tasks, today_for(request)).per_project
        context = self.get_serializer_context()
        context['stats'] = per_project
        serializer = ProjectSerializer(projects, many=True, context=context)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        project = self.get_object()
        try:
            tasks = self.repository_class().active_tasks(project_id=project.pk)
        except RepositoryError as e:
            return self._unavailable(e)

        context = self.get_serializer_context()
        context['stats'] = aggregate(tasks, today_for(request)).per_project
        return Response(ProjectSerializer(project, context=context).data)

    @extend_schema(responses={200: ProjectStatsSerializer})
    @action(detail=True, methods=['get'])
    def stats(self, request, pk=None):
        project = self.get_object()
        today = today_for(request)
        try:
            tasks = self.repository_class().active_tasks(project_id=project.pk)
        except RepositoryError as e:
            return self._unavailable(e)

        stats = project_stats(str(project.pk), tasks, today, name=project.name)
        return Response(ProjectStatsSerializer(stats).data)

    @extend_schema(responses={200: TimelineSerializer})
    @action(detail=True, methods=['get'])
    def timeline(self, request, pk=None):
        project = self.get_object()
        today = today_for(request)
        try:
            tasks = self.repository_class().active_tasks(project_id=project.pk)
        except RepositoryError as e:
            return self._unavailable(e)
        return Response(TimelineSerializer(layout(tasks, today)).data)
