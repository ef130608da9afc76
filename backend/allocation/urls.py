#allocation/urls.py
from django.urls import path
from .views import ResourceAllocationListView, ResourceListView

urlpatterns = [
    path("resources", ResourceListView.as_view(), name="resource_list"),
    path("resources/<int:resource_id>/allocations", ResourceAllocationListView.as_view(), name="resource_allocations"),
]
