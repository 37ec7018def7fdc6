"""
URL Configuration for PayPal accounts, works, withdrawals and operations.
"""
from django.urls import path
from . import views

app_name = 'paypal'

urlpatterns = [
    path('accounts/', views.paypal_accounts_handler, name='paypal-accounts'),
    path('accounts/<int:account_id>/', views.paypal_account_detail, name='paypal-account-detail'),
    path('works/', views.paypal_works_handler, name='paypal-works'),
    path('withdrawals/', views.paypal_withdrawals_handler, name='paypal-withdrawals'),
    path(
        'withdrawals/<int:withdrawal_id>/cfo-comment/',
        views.paypal_withdrawal_cfo_comment,
        name='paypal-withdrawal-cfo-comment'
    ),
    path('operations/', views.paypal_operations_handler, name='paypal-operations'),
    path('operations/stats/', views.paypal_operation_stats, name='paypal-operation-stats'),
    path('operations/<int:operation_id>/', views.paypal_operation_detail, name='paypal-operation-detail'),
]
