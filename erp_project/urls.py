"""
URL configuration for erp_project project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.conf import settings
from django.conf.urls.static import static
from django.urls import path, include

urlpatterns = [
    # Authentication endpoints (login, logout, password, tokens)
    path('auth/', include('core.user_accounts.auth_urls')),

    path('core/', include('core.urls')),
    path('finance/', include('Finance.urls')),
    path('casino/', include('Casino.urls')),
    path('hr/', include('HR.urls')),
]

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
