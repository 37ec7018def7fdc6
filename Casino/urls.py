"""
Casino module URL configuration.
"""
from django.urls import path, include

urlpatterns = [
    path('', include('Casino.casinos.urls')),
    path('', include('Casino.works.urls')),
]
