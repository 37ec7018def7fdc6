"""
URL Configuration for NDAs.
"""
from django.urls import path
from . import views

app_name = 'nda'

urlpatterns = [
    path('templates/', views.templates_handler, name='nda-templates'),
    path('templates/<int:template_id>/', views.template_detail, name='nda-template-detail'),
    path('generate/', views.generate_agreement, name='nda-generate'),
    path('sign/', views.sign_agreement, name='nda-sign'),
    path('sign/<int:agreement_id>/', views.sign_check, name='nda-sign-check'),
    path('agreements/', views.agreements_list, name='nda-agreements'),
]
