from django.contrib import admin
from django_summernote.admin import SummernoteModelAdmin

from project.models import Project
from task.models import Task


class TaskInline(admin.TabularInline):
    model = Task
    fields = ('title', 'assignee', 'status', 'priority', 'start_date', 'due_date', 'is_active')
    extra = 0
    show_change_link = True


@admin.register(Project)
class ProjectAdmin(SummernoteModelAdmin):
    list_display = ('name', 'status', 'due_date', 'created_at', 'updated_at')
    search_fields = ('name', 'description')
    list_filter = ('status',)
    inlines = [TaskInline]
    summernote_fields = ('description',)
