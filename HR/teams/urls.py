"""
URL Configuration for teams.
"""
from django.urls import path
from . import views

app_name = 'teams'

urlpatterns = [
    path('', views.teams_handler, name='teams'),
    path('sync/', views.teams_sync, name='teams-sync'),
    path('<int:team_id>/', views.team_detail, name='team-detail'),
    path('<int:team_id>/members/', views.team_members, name='team-members'),
    path('<int:team_id>/calls/', views.team_calls, name='team-calls'),
]
