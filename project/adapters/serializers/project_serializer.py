from rest_framework import serializers

from project.models import Project


class ProjectSerializer(serializers.ModelSerializer):
    """
    Project with a short progress summary.

    The summary comes from the ``stats`` mapping in the serializer context
    (project id -> ProjectStats); projects without active tasks get zeros.
    """
    summary = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = (
            'id',
            'name',
            'status',
            'due_date',
            'description',
            'slack_channel_id',
            'created_at',
            'updated_at',
            'summary',
        )
        read_only_fields = ('created_at', 'updated_at')

    def get_summary(self, obj):
        stats = self.context.get('stats', {}).get(str(obj.pk))
        if stats is None:
            return {'total': 0, 'completed': 0, 'overdue': 0, 'completion_pct': 0.0, 'next_deadline': None}
        return {
            'total': stats.total,
            'completed': stats.counts.completed,
            'overdue': stats.counts.overdue,
            'completion_pct': stats.completion_pct,
            'next_deadline': stats.next_deadline.isoformat() if stats.next_deadline else None,
        }
