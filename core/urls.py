"""
URL Configuration for Core module.
This module handles users, the audit log and notifications.
"""
from django.urls import path, include

app_name = 'core'

urlpatterns = [
    # User management sub-app URLs
    path('users/', include('core.user_accounts.urls')),

    # Audit log
    path('history/', include('core.action_history.urls')),

    # In-app notifications
    path('notifications/', include('core.notifications.urls')),
]
