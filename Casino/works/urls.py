"""
URL Configuration for junior works and withdrawals.
"""
from django.urls import path
from . import views

app_name = 'works'

urlpatterns = [
    path('works/', views.works_handler, name='works'),
    path('works/<int:work_id>/', views.work_detail, name='work-detail'),

    path('work-withdrawals/', views.work_withdrawal_create, name='work-withdrawal-create'),
    path('work-withdrawals/<int:withdrawal_id>/', views.work_withdrawal_detail, name='work-withdrawal-detail'),
    path('withdrawals/', views.withdrawals_list, name='withdrawals'),
    path('withdrawals/<int:withdrawal_id>/', views.withdrawal_detail, name='withdrawal-detail'),
    path('withdrawals/<int:withdrawal_id>/check/', views.withdrawal_check, name='withdrawal-check'),
    path('withdrawals/<int:withdrawal_id>/hr-comment/', views.withdrawal_hr_comment, name='withdrawal-hr-comment'),
    path('withdrawals/<int:withdrawal_id>/cfo-comment/', views.withdrawal_cfo_comment, name='withdrawal-cfo-comment'),

    # Approval chain
    path('teamlead/withdrawals/', views.teamlead_withdrawals, name='teamlead-withdrawals'),
    path(
        'teamlead/withdrawals/<int:withdrawal_id>/approve/',
        views.teamlead_withdrawal_approve,
        name='teamlead-withdrawal-approve'
    ),
    path(
        'teamlead/withdrawals/<int:withdrawal_id>/reject/',
        views.teamlead_withdrawal_reject,
        name='teamlead-withdrawal-reject'
    ),
    path('manager/withdrawals/', views.manager_withdrawals, name='manager-withdrawals'),
    path(
        'universal/withdrawals/<int:withdrawal_id>/action/',
        views.universal_withdrawal_action,
        name='universal-withdrawal-action'
    ),
]
