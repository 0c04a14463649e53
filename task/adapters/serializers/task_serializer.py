from django.db import transaction
from rest_framework import serializers

from engine import authorization, classifier
from engine.progress import progress, progress_color
from engine.records import FileRef
from task.models import Status, SubTask, Task


class FileRefSerializer(serializers.Serializer):
    name = serializers.CharField()
    location = serializers.CharField()
    uploaded_at = serializers.DateTimeField(allow_null=True)


class SubTaskRecordSerializer(serializers.Serializer):
    id = serializers.CharField()
    description = serializers.CharField()
    completed = serializers.BooleanField()
    files = FileRefSerializer(many=True)


class TaskSerializer(serializers.Serializer):
    """
    Read representation of an engine Task record plus everything derived
    from it. Needs ``today`` and ``actor`` in the serializer context so that
    progress, urgency and permissions are computed against the same day and
    user for every row of a response.
    """
    id = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField()
    assignee = serializers.CharField(allow_null=True)
    assignee_avatar = serializers.CharField(allow_null=True)
    project_id = serializers.CharField()
    project = serializers.CharField()
    client = serializers.CharField(allow_null=True)
    status = serializers.SerializerMethodField()
    priority = serializers.SerializerMethodField()
    start_date = serializers.DateField(allow_null=True)
    due_date = serializers.DateField(allow_null=True)
    budget = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    actual_cost = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    version = serializers.IntegerField()
    subtasks = SubTaskRecordSerializer(many=True)

    progress = serializers.SerializerMethodField()
    progress_color = serializers.SerializerMethodField()
    classification = serializers.SerializerMethodField()
    days_until_due = serializers.SerializerMethodField()
    due_label = serializers.SerializerMethodField()
    can_edit = serializers.SerializerMethodField()
    can_edit_costs = serializers.SerializerMethodField()

    @property
    def today(self):
        return self.context['today']

    @property
    def actor(self):
        return self.context['actor']

    def get_status(self, obj):
        return obj.status.value

    def get_priority(self, obj):
        return obj.priority.value if obj.priority else None

    def get_progress(self, obj):
        return round(progress(obj, self.today), 2)

    def get_progress_color(self, obj):
        return progress_color(obj, self.today)

    def get_classification(self, obj):
        result = classifier.classify(obj, self.today)
        return {'state': result.state, 'color': result.color}

    def get_days_until_due(self, obj):
        return classifier.days_until_due(obj, self.today)

    def get_due_label(self, obj):
        return classifier.due_label(obj, self.today)

    def get_can_edit(self, obj):
        return authorization.can_edit(obj, self.actor)

    def get_can_edit_costs(self, obj):
        return authorization.can_edit_costs(obj, self.actor)


class TaskSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField()
    assignee = serializers.CharField(allow_null=True)
    project = serializers.CharField()
    status = serializers.SerializerMethodField()
    due_date = serializers.DateField(allow_null=True)

    def get_status(self, obj):
        return obj.status.value


class VersionedChangeSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class StatusChangeSerializer(VersionedChangeSerializer):
    status = serializers.ChoiceField(choices=Status.choices)


class SubTaskToggleSerializer(VersionedChangeSerializer):
    completed = serializers.BooleanField()


class FileAttachSerializer(VersionedChangeSerializer):
    name = serializers.CharField(max_length=255)
    location = serializers.CharField(max_length=1024)

    def to_file_ref(self):
        return FileRef(name=self.validated_data['name'], location=self.validated_data['location'])


class AmountChangeSerializer(VersionedChangeSerializer):
    # Negative amounts pass through so the engine can reject them uniformly
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class TaskWriteSerializer(serializers.ModelSerializer):
    subtasks = serializers.ListField(
        child=serializers.CharField(max_length=500),
        required=False,
        allow_empty=True,
        write_only=True,
    )

    class Meta:
        model = Task
        fields = (
            'title',
            'description',
            'project',
            'assignee',
            'status',
            'priority',
            'start_date',
            'due_date',
            'client',
            'budget',
            'actual_cost',
            'subtasks',
        )

    def create(self, validated_data):
        subtasks = validated_data.pop('subtasks', [])
        # A task is never stored without its subtasks
        with transaction.atomic():
            task = Task.objects.create(**validated_data)
            SubTask.objects.bulk_create(
                SubTask(task=task, description=description, position=index)
                for index, description in enumerate(subtasks)
            )
        return task
