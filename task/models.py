from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Status(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    DONE = 'done', 'Done'


class Priority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class ActiveTaskManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)


class Task(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    project = models.ForeignKey('project.Project', on_delete=models.CASCADE, related_name='tasks')
    assignee = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_tasks'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    priority = models.CharField(max_length=10, choices=Priority.choices, null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    client = models.CharField(max_length=255, null=True, blank=True)
    budget = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    actual_cost = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    # Soft delete; inactive tasks drop out of every view
    is_active = models.BooleanField(default=True)
    # Bumped on every write, used for optimistic concurrency checks
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active = ActiveTaskManager()

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['id']


class SubTask(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='subtasks')
    description = models.CharField(max_length=500)
    completed = models.BooleanField(default=False)
    position = models.PositiveIntegerField(default=0)

    def __str__(self):
        return self.description

    class Meta:
        ordering = ['position', 'id']


class SubTaskFile(models.Model):
    subtask = models.ForeignKey(SubTask, on_delete=models.CASCADE, related_name='files')
    name = models.CharField(max_length=255)
    # Where the storage service put the file; storage itself lives elsewhere
    location = models.CharField(max_length=1024)
    uploaded_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['uploaded_at', 'id']
