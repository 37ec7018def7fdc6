"""
URL Configuration for User Accounts app.
Handles user management and the caller's own profile.
Authentication endpoints are in auth_urls.py
"""
from django.urls import path
from . import views

app_name = 'user_accounts'

urlpatterns = [
    path('', views.users_handler, name='users'),
    path('me/', views.me, name='me'),
    path('<int:user_id>/', views.user_detail, name='user_detail'),
]
