from django.contrib import admin
from .models import JobExecutionLog


@admin.register(JobExecutionLog)
class JobExecutionLogAdmin(admin.ModelAdmin):
    list_display = ("id", "job_name", "job_id", "status", "success", "started_at", "duration_ms", "retry_count")
    list_filter = ("job_name", "status", "success", "queue")
    search_fields = ("job_name", "job_id", "error_message")
    date_hierarchy = "started_at"
    ordering = ("-started_at",)
    readonly_fields = [f.name for f in JobExecutionLog._meta.fields]

    # Execution logs are written by the jobs themselves
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
