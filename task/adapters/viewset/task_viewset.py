import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from engine import transitions
from engine.transitions import (
    AttachFile,
    SetActualCost,
    SetBudget,
    SetStatus,
    ToggleSubtask,
    apply_change,
)
from project.models import Project
from taskflow.jwt_auth import CookieJWTAuthentication
from task.permission import IsPrivilegedRole
from task.repository import (
    RepositoryError,
    StaleTaskError,
    SubTaskNotFound,
    TaskNotFound,
    TaskRepository,
    storage_errors,
)
from user.identity import actor_for_user
from utils.clock import today_for
from utils.repository_response import repository_unavailable
from utils.custom_paginator import CustomPaginator
from utils.slack_notification import notify_task_status_change
from ..serializers.task_serializer import (
    AmountChangeSerializer,
    FileAttachSerializer,
    StatusChangeSerializer,
    SubTaskToggleSerializer,
    TaskSerializer,
    TaskWriteSerializer,
)

logger = logging.getLogger(__name__)

REJECTION_STATUS = {
    transitions.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    transitions.CONFLICT: status.HTTP_409_CONFLICT,
    transitions.UNKNOWN_SUBTASK: status.HTTP_404_NOT_FOUND,
}


class TaskViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.CreateModelMixin,
                  viewsets.GenericViewSet):
    """
    Tasks API.

    Reads return engine records with derived progress, urgency and edit
    permissions. Every write goes through ``apply_change`` so the same
    authorization decision covers status changes, subtask toggles, file
    attachments and cost edits; a rejected change is reported, never dropped.
    There is no generic update endpoint.
    """
    serializer_class = TaskSerializer
    pagination_class = CustomPaginator
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]
    repository_class = TaskRepository

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['project', 'status', 'priority', 'assignee']
    search_fields = ['title', 'description']
    ordering_fields = ['due_date', 'start_date', 'created_at', 'priority', 'title']
    ordering = ['id']

    @property
    def repository(self):
        if not hasattr(self, '_repository'):
            self._repository = self.repository_class()
        return self._repository

    def get_queryset(self):
        return self.repository.queryset()

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsPrivilegedRole()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == 'create':
            return TaskWriteSerializer
        return TaskSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['today'] = today_for(self.request)
        context['actor'] = actor_for_user(self.request.user)
        return context

    def _read(self, record, status_code=status.HTTP_200_OK):
        return Response(TaskSerializer(record, context=self.get_serializer_context()).data, status=status_code)

    def _unavailable(self, error):
        return repository_unavailable(error, type(self).__name__)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        try:
            records = self.repository.to_records(page if page is not None else queryset)
        except RepositoryError as e:
            return self._unavailable(e)

        serializer = TaskSerializer(records, many=True, context=self.get_serializer_context())
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        try:
            record = self.repository.get(pk)
        except TaskNotFound:
            return Response({'error': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
        except RepositoryError as e:
            return self._unavailable(e)
        return self._read(record)

    @extend_schema(request=TaskWriteSerializer, responses={201: TaskSerializer})
    def create(self, request, *args, **kwargs):
        write_serializer = self.get_serializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        try:
            with storage_errors('create'):
                instance = write_serializer.save()
        except RepositoryError as e:
            return self._unavailable(e)
        logger.info(f"Task {instance.pk} created in project {instance.project_id}")

        try:
            record = self.repository.get(instance.pk)
        except RepositoryError as e:
            return self._unavailable(e)
        return self._read(record, status.HTTP_201_CREATED)

    def _apply(self, request, pk, change):
        actor = actor_for_user(request.user)
        try:
            current = self.repository.get(pk)
        except TaskNotFound:
            return Response({'error': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
        except RepositoryError as e:
            return self._unavailable(e)

        result = apply_change(current, change, actor)
        if not result.ok:
            return Response(
                {'error': result.reason, 'detail': result.detail},
                status=REJECTION_STATUS.get(result.reason, status.HTTP_400_BAD_REQUEST),
            )

        try:
            updated = self.repository.apply(result.intent)
        except StaleTaskError as e:
            return Response({'error': transitions.CONFLICT, 'detail': str(e)}, status=status.HTTP_409_CONFLICT)
        except (TaskNotFound, SubTaskNotFound) as e:
            return Response({'error': 'not_found', 'detail': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except RepositoryError as e:
            return self._unavailable(e)

        logger.info(f"{type(change).__name__} applied to task {pk} by {actor.display_name!r}")
        if isinstance(change, SetStatus):
            project = Project.objects.filter(pk=updated.project_id).first()
            notify_task_status_change(
                updated, project, actor.display_name, current.status.value, updated.status.value
            )
        return self._read(updated)

    @extend_schema(request=StatusChangeSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def change_status(self, request, pk=None):
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = SetStatus(
            status=serializer.validated_data['status'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return self._apply(request, pk, change)

    @extend_schema(request=SubTaskToggleSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=['post'], url_path=r'subtasks/(?P<subtask_id>[^/.]+)/toggle')
    def toggle_subtask(self, request, pk=None, subtask_id=None):
        serializer = SubTaskToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = ToggleSubtask(
            subtask_id=subtask_id,
            completed=serializer.validated_data['completed'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return self._apply(request, pk, change)

    @extend_schema(request=FileAttachSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=['post'], url_path=r'subtasks/(?P<subtask_id>[^/.]+)/files')
    def attach_file(self, request, pk=None, subtask_id=None):
        serializer = FileAttachSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = AttachFile(
            subtask_id=subtask_id,
            file=serializer.to_file_ref(),
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return self._apply(request, pk, change)

    @extend_schema(request=AmountChangeSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=['post'], url_path='actual-cost')
    def set_actual_cost(self, request, pk=None):
        serializer = AmountChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = SetActualCost(
            amount=serializer.validated_data['amount'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return self._apply(request, pk, change)

    @extend_schema(request=AmountChangeSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=['post'], url_path='budget')
    def set_budget(self, request, pk=None):
        serializer = AmountChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = SetBudget(
            amount=serializer.validated_data['amount'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return self._apply(request, pk, change)

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsPrivilegedRole])
    def deactivate(self, request, pk=None):
        try:
            self.repository.deactivate(pk)
        except TaskNotFound:
            return Response({'error': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
        except RepositoryError as e:
            return self._unavailable(e)
        return Response(status=status.HTTP_204_NO_CONTENT)
