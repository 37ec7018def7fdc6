"""
URL Configuration for expenses.
"""
from django.urls import path
from . import views

app_name = 'expenses'

urlpatterns = [
    path('', views.expenses_handler, name='expenses'),
    path('export/', views.expenses_export, name='expenses-export'),
    path('<int:expense_id>/', views.expense_detail, name='expense-detail'),
]
