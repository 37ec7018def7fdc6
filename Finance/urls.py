"""
Finance App - Main URL Configuration
This file routes URLs to the appropriate sub-apps within the Finance module.
"""
from django.urls import path, include

app_name = 'finance'

urlpatterns = [
    # Exchange rates
    path('currency-rates/', include('Finance.currency.urls')),

    # PayPal accounts, works and withdrawals
    path('paypal/', include('Finance.paypal.urls')),

    # Expenses
    path('expenses/', include('Finance.expenses.urls')),

    # Banks, bank accounts and cards
    path('', include('Finance.cash_management.urls')),
]
