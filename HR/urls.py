"""
HR App - Main URL Configuration
Routes HR URLs to the NDA, team and task sub-apps.
"""
from django.urls import path, include

urlpatterns = [
    path('nda/', include('HR.nda.urls')),
    path('teams/', include('HR.teams.urls')),
    path('', include('HR.tasks.urls')),
]
