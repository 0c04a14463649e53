from django.contrib import admin
from django_summernote.admin import SummernoteModelAdmin

from .models import SubTask, SubTaskFile, Task


class SubTaskInline(admin.TabularInline):
    model = SubTask
    extra = 1


@admin.register(Task)
class TaskAdmin(SummernoteModelAdmin):
    list_display = ('title', 'project', 'assignee', 'status', 'priority', 'due_date', 'is_active')
    list_filter = ('status', 'priority', 'project', 'is_active')
    search_fields = ('title', 'description')
    summernote_fields = ('description',)
    readonly_fields = ('version', 'created_at', 'updated_at')
    inlines = [SubTaskInline]


@admin.register(SubTaskFile)
class SubTaskFileAdmin(admin.ModelAdmin):
    list_display = ('name', 'subtask', 'uploaded_at')
    search_fields = ('name', 'subtask__description')
