from django.urls import path
from .views import JobExecutionLogListView, JobStatsView, RentCycleTriggerView

urlpatterns = [
    path("rent-cycle/trigger/", RentCycleTriggerView.as_view(), name="job-rent-cycle-trigger"),
    path("logs/", JobExecutionLogListView.as_view(), name="job-log-list"),
    path("stats/", JobStatsView.as_view(), name="job-stats"),
]
