"""
URL Configuration for Cash Management API endpoints.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'cash_management'

router = DefaultRouter()
router.register(r'banks', views.BankViewSet, basename='bank')
router.register(r'bank-accounts', views.BankAccountViewSet, basename='bank-account')
router.register(r'bank-assignments', views.BankAssignmentViewSet, basename='bank-assignment')
router.register(r'cards', views.CardViewSet, basename='card')

urlpatterns = [
    path('', include(router.urls)),
]
