from django.urls import path
from . import views

app_name = 'action_history'

urlpatterns = [
    path('', views.global_history, name='global_history'),
]
