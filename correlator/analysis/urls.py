from django.urls import path
from . import views

urlpatterns = [
    path("columns", views.ColumnsView.as_view(), name="columns"),
    path("columns/", views.ColumnsView.as_view(), name="columns"),
    path("analyze", views.AnalyzeView.as_view(), name="analyze"),
    path("analyze/", views.AnalyzeView.as_view(), name="analyze"),
]
