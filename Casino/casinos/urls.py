"""
URL Configuration for casinos and tester work.
"""
from django.urls import path
from . import views

app_name = 'casinos'

urlpatterns = [
    path('casinos/', views.casinos_handler, name='casinos'),
    path('casinos/<int:casino_id>/', views.casino_detail, name='casino-detail'),
    path('casinos/<int:casino_id>/assign-junior/', views.casino_assign_junior, name='casino-assign-junior'),

    path('casino-tests/', views.casino_tests_handler, name='casino-tests'),
    path('casino-tests/<int:test_id>/', views.casino_test_detail, name='casino-test-detail'),

    path('test-works/', views.test_works_handler, name='test-works'),
    path('test-works/withdrawal/', views.test_work_withdrawal_create, name='test-work-withdrawal-create'),
    path('test-works/<int:test_id>/withdrawal/', views.test_work_withdrawal_update, name='test-work-withdrawal'),

    path(
        'manager/test-withdrawals/<int:withdrawal_id>/',
        views.manager_test_withdrawal,
        name='manager-test-withdrawal'
    ),
]
