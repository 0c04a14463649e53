from rest_framework import serializers

from task.adapters.serializers.task_serializer import TaskSummarySerializer


class CountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    completed = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    pending = serializers.IntegerField()
    overdue = serializers.IntegerField()
    completion_pct = serializers.FloatField()


class BudgetSliceSerializer(serializers.Serializer):
    name = serializers.CharField()
    value = serializers.DecimalField(max_digits=14, decimal_places=2)
    percentage = serializers.FloatField()


class ProjectStatsSerializer(serializers.Serializer):
    project_id = serializers.CharField()
    name = serializers.CharField()
    client = serializers.CharField(allow_null=True)
    counts = CountsSerializer()
    budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    variance = serializers.DecimalField(max_digits=14, decimal_places=2)
    budget_usage_pct = serializers.FloatField()
    variance_pct = serializers.FloatField()
    budget_health = serializers.CharField()
    budget_breakdown = BudgetSliceSerializer(many=True)
    next_deadline = serializers.DateField(allow_null=True)
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    upcoming_deadlines = TaskSummarySerializer(many=True)


class PortfolioStatsSerializer(serializers.Serializer):
    counts = CountsSerializer()
    budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    variance = serializers.DecimalField(max_digits=14, decimal_places=2)
    budget_usage_pct = serializers.FloatField()
    variance_pct = serializers.FloatField()
    project_count = serializers.IntegerField()
    top_assignees = serializers.SerializerMethodField()
    monthly_completions = serializers.ListField(child=serializers.IntegerField())
    status_distribution = serializers.DictField(child=serializers.IntegerField())
    priority_distribution = serializers.DictField(child=serializers.IntegerField())
    due_soon = TaskSummarySerializer(many=True)

    def get_top_assignees(self, obj):
        return [{'assignee': name, 'count': count} for name, count in obj.top_assignees]


class TaskBarSerializer(serializers.Serializer):
    """Bar positions in days, plus ``left``/``width`` in layout units."""
    task_id = serializers.CharField()
    title = serializers.CharField()
    status = serializers.CharField()
    offset_days = serializers.IntegerField()
    duration_days = serializers.IntegerField()
    progress = serializers.FloatField()
    left = serializers.SerializerMethodField()
    width = serializers.SerializerMethodField()

    def get_left(self, obj):
        return self.context['layout'].left(obj)

    def get_width(self, obj):
        return self.context['layout'].width(obj)


class SubtaskBarSerializer(serializers.Serializer):
    task_id = serializers.CharField()
    subtask_id = serializers.CharField()
    description = serializers.CharField()
    completed = serializers.BooleanField()
    offset_days = serializers.IntegerField()
    width = serializers.FloatField()
    left = serializers.SerializerMethodField()

    def get_left(self, obj):
        return self.context['layout'].left(obj)


class TimelineSerializer(serializers.Serializer):
    window_start = serializers.DateField()
    window_end = serializers.DateField()
    total_days = serializers.IntegerField()
    day_width = serializers.FloatField()
    columns = serializers.SerializerMethodField()
    bars = serializers.SerializerMethodField()
    subtask_bars = serializers.SerializerMethodField()

    def get_columns(self, obj):
        return [day.isoformat() for day in obj.columns()]

    def get_bars(self, obj):
        return TaskBarSerializer(obj.bars, many=True, context={'layout': obj}).data

    def get_subtask_bars(self, obj):
        return SubtaskBarSerializer(obj.subtask_bars, many=True, context={'layout': obj}).data
