from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from task.adapters.serializers.task_serializer import TaskSerializer
from task.repository import RepositoryError, TaskRepository
from taskflow.jwt_auth import CookieJWTAuthentication
from user.identity import actor_for_user
from utils.clock import today_for
from utils.repository_response import repository_unavailable


class DueTasksView(APIView):
    """
    API view to return all tasks that are due until today (not done)
    """
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]

    def get(self, request):
        today = today_for(request)
        try:
            tasks = TaskRepository().active_tasks()
        except RepositoryError as e:
            return repository_unavailable(e, 'DueTasksView')

        due_tasks = sorted(
            (
                task for task in tasks
                if not task.is_done and task.due_date is not None and task.due_date <= today
            ),
            key=lambda task: task.due_date,
        )

        serializer = TaskSerializer(
            due_tasks, many=True, context={'today': today, 'actor': actor_for_user(request.user)}
        )
        return Response({"due_tasks": serializer.data})
