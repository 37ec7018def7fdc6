"""
URL Configuration for tasks.
"""
from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    path('tasks/', views.tasks_handler, name='tasks'),
    path('tasks/<int:task_id>/', views.task_detail, name='task-detail'),
    path('tasks/<int:task_id>/delegate/', views.task_delegate, name='task-delegate'),
    path('tasks/<int:task_id>/checklist/', views.task_checklist, name='task-checklist'),
    path('tasks/checklist/<int:item_id>/', views.checklist_item_detail, name='checklist-item-detail'),
    path('task-templates/', views.task_templates_handler, name='task-templates'),
    path('task-templates/<int:template_id>/', views.task_template_detail, name='task-template-detail'),
    path(
        'task-templates/<int:template_id>/create-task/',
        views.task_from_template,
        name='task-from-template'
    ),
    path('analytics/trends/', views.task_trends, name='task-trends'),
]
