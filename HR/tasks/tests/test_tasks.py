"""
Tests for tasks, delegation, checklists, templates and the monthly trends report.
"""
from django.utils import timezone
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.action_history.models import ActionHistory
from core.base.test_utils import setup_roles, create_user
from core.job_roles.core_config import Roles, UserStatus
from core.notifications.models import Notification
from HR.tasks.models import Task, TaskComment, TaskChecklistItem, TaskTemplate


class TaskCreateAPITest(APITestCase):
    """POST /hr/tasks/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/hr/tasks/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]

    def test_create_with_checklist(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        data = {
            'title': 'Verify documents',
            'assignee_id': self.junior.pk,
            'priority': 'high',
            'tags': ['kyc'],
            'checklist': ['Passport', {'title': 'Utility bill'}, '  '],
        }
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        task = Task.objects.get(pk=response.data['task']['id'])
        self.assertEqual(task.created_by, self.users[Roles.MANAGER])
        self.assertEqual(task.team_lead, self.users[Roles.TEAMLEAD])
        self.assertEqual(task.task_status, Task.STATUS_BACKLOG)
        self.assertEqual(
            list(task.checklist_items.values_list('title', 'order_index')),
            [('Passport', 0), ('Utility bill', 1)]
        )
        self.assertTrue(Notification.objects.filter(user=self.junior, type='task').exists())
        self.assertTrue(ActionHistory.objects.filter(action_type='task_created').exists())

    def test_non_junior_assignee_has_no_team_lead(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.post(
            self.url, {'title': 'Review', 'assignee_id': self.users[Roles.HR].pk}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(Task.objects.get().team_lead_id)

    def test_title_required(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.post(self.url, {'priority': 'low'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('title', response.data)

    def test_junior_cannot_create(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {'title': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_my_tasks(self):
        Task.objects.create(title='A', assignee=self.users[Roles.MANAGER], created_by=self.users[Roles.MANAGER])
        Task.objects.create(title='B', assignee=self.users[Roles.HR], created_by=self.users[Roles.MANAGER])
        self.client.force_authenticate(user=self.users[Roles.MANAGER])

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get(self.url, {'my_tasks': 'true'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['title'], 'A')

    def test_list_matches_detail_visibility(self):
        manager = self.users[Roles.MANAGER]
        Task.objects.create(title='Own work', assignee=self.junior, created_by=manager)
        Task.objects.create(title='HR review', assignee=self.users[Roles.HR], created_by=manager)
        Task.objects.create(title='Filed by me', created_by=self.users[Roles.CFO])

        self.client.force_authenticate(user=self.junior)
        titles = [task['title'] for task in self.client.get(self.url).data['results']]
        self.assertEqual(titles, ['Own work'])

        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        titles = [task['title'] for task in self.client.get(self.url).data['results']]
        self.assertEqual(titles, ['Own work'])

        self.client.force_authenticate(user=self.users[Roles.CFO])
        titles = [task['title'] for task in self.client.get(self.url).data['results']]
        self.assertEqual(titles, ['Filed by me'])

        self.client.force_authenticate(user=self.users[Roles.HR])
        self.assertEqual(self.client.get(self.url).data['count'], 3)


class TaskDetailAPITest(APITestCase):
    """/hr/tasks/{id}/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.creator = self.users[Roles.MANAGER]
        self.task = Task.objects.create(
            title='Call the bank', assignee=self.junior, created_by=self.creator,
            team_lead=self.users[Roles.TEAMLEAD],
        )
        self.url = f'/hr/tasks/{self.task.pk}/'

    def test_view_permissions(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['comments'], [])

        self.client.force_authenticate(user=create_user(Roles.JUNIOR))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_status_change_to_done(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(self.url, {'task_status': 'done'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.task.refresh_from_db()
        self.assertEqual(self.task.task_status, Task.STATUS_DONE)
        self.assertIsNotNone(self.task.completed_at)
        comment = TaskComment.objects.get(task=self.task)
        self.assertEqual(comment.comment_type, TaskComment.TYPE_STATUS_CHANGE)
        self.assertEqual(comment.content, 'Status changed from "backlog" to "done"')
        self.assertTrue(ActionHistory.objects.filter(action_type='task_status_changed').exists())

    def test_reopen_clears_completed_at(self):
        self.task.task_status = Task.STATUS_DONE
        self.task.completed_at = timezone.now()
        self.task.save()
        self.client.force_authenticate(user=self.creator)
        self.client.patch(self.url, {'task_status': 'in_progress'}, format='json')
        self.task.refresh_from_db()
        self.assertIsNone(self.task.completed_at)

    def test_update_without_status_change(self):
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        response = self.client.patch(self.url, {'priority': 'urgent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['task']['priority'], 'urgent')
        self.assertFalse(TaskComment.objects.filter(task=self.task).exists())

    def test_invalid_status(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(self.url, {'task_status': 'finished'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_hr_cannot_update(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.patch(self.url, {'priority': 'low'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_rules(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.task.task_status = Task.STATUS_DONE
        self.task.save()
        self.client.force_authenticate(user=self.creator)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Completed tasks cannot be deleted')

        self.task.task_status = Task.STATUS_REVIEW
        self.task.save()
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Task.objects.filter(pk=self.task.pk).exists())


class TaskDelegateAPITest(APITestCase):
    """POST /hr/tasks/{id}/delegate/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.teamlead = self.users[Roles.TEAMLEAD]
        self.task = Task.objects.create(title='Open accounts', created_by=self.users[Roles.MANAGER])
        self.url = f'/hr/tasks/{self.task.pk}/delegate/'

    def test_assignee_required(self):
        self.client.force_authenticate(user=self.teamlead)
        response = self.client.post(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Assignee is required')

    def test_teamlead_delegates_to_own_junior(self):
        junior = self.users[Roles.JUNIOR]
        self.client.force_authenticate(user=self.teamlead)
        response = self.client.post(
            self.url, {'assignee_id': junior.pk, 'notes': 'Start today'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], f'Task delegated to {junior.first_name}')

        self.task.refresh_from_db()
        self.assertEqual(self.task.assignee, junior)
        self.assertEqual(self.task.team_lead, self.teamlead)
        self.assertEqual(self.task.task_status, Task.STATUS_TODO)
        comment = TaskComment.objects.get(task=self.task)
        self.assertEqual(comment.comment_type, TaskComment.TYPE_DELEGATION)
        self.assertEqual(comment.content, 'Task delegated: Start today')
        self.assertTrue(Notification.objects.filter(user=junior, type='task').exists())

    def test_teamlead_cannot_delegate_to_outsider(self):
        self.client.force_authenticate(user=self.teamlead)
        response = self.client.post(self.url, {'assignee_id': create_user(Roles.JUNIOR).pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_inactive_assignee(self):
        inactive = create_user(Roles.JUNIOR, status=UserStatus.INACTIVE)
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(self.url, {'assignee_id': inactive.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid assignee')

    def test_hr_not_creator_denied(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.post(self.url, {'assignee_id': self.users[Roles.JUNIOR].pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_status_kept_when_not_backlog(self):
        self.task.task_status = Task.STATUS_IN_PROGRESS
        self.task.save()
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        self.client.post(self.url, {'assignee_id': self.users[Roles.HR].pk}, format='json')
        self.task.refresh_from_db()
        self.assertEqual(self.task.task_status, Task.STATUS_IN_PROGRESS)
        self.assertIsNone(self.task.team_lead_id)


class TaskChecklistAPITest(APITestCase):
    """Checklist listing and item toggling."""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.task = Task.objects.create(title='Onboarding', assignee=self.junior, created_by=self.users[Roles.HR])
        self.second = TaskChecklistItem.objects.create(task=self.task, title='Second', order_index=1)
        self.first = TaskChecklistItem.objects.create(task=self.task, title='First', order_index=0)

    def test_checklist_ordered(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.get(f'/hr/tasks/{self.task.pk}/checklist/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['title'] for item in response.data['checklist']], ['First', 'Second'])

    def test_toggle_item(self):
        self.client.force_authenticate(user=self.junior)
        url = f'/hr/tasks/checklist/{self.first.pk}/'
        response = self.client.patch(url, {'is_completed': 'yes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'is_completed must be true or false')

        response = self.client.patch(url, {'is_completed': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.first.refresh_from_db()
        self.assertTrue(self.first.is_completed)
        self.assertEqual(self.task.checklist_progress()['percentage'], 50.0)

    def test_completed_task_locked(self):
        self.task.task_status = Task.STATUS_DONE
        self.task.save()
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(f'/hr/tasks/checklist/{self.first.pk}/', {'is_completed': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot modify checklist of completed tasks')

    def test_cfo_cannot_view(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.get(f'/hr/tasks/{self.task.pk}/checklist/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TaskTrendsAPITest(APITestCase):
    """GET /hr/analytics/trends/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()

    def test_current_month_counts(self):
        Task.objects.create(title='Open', created_by=self.users[Roles.MANAGER])
        Task.objects.create(
            title='Closed', created_by=self.users[Roles.MANAGER],
            task_status=Task.STATUS_DONE, completed_at=timezone.now(),
        )
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.get('/hr/analytics/trends/', {'time_range': '6months'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['time_range'], '6months')
        self.assertEqual(len(response.data['trends']), 6)

        current = response.data['trends'][0]
        self.assertEqual(current['created_tasks'], 2)
        self.assertEqual(current['completed_tasks'], 1)
        self.assertEqual(current['completion_rate'], 50.0)

    def test_invalid_range_falls_back(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.get('/hr/analytics/trends/', {'time_range': 'forever'})
        self.assertEqual(response.data['time_range'], '3months')
        self.assertEqual(len(response.data['trends']), 3)
        self.assertEqual(response.data['trends'][0]['completion_rate'], 0)

    def test_junior_denied(self):
        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        response = self.client.get('/hr/analytics/trends/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TaskTemplateAPITest(APITestCase):
    """/hr/task-templates/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/hr/task-templates/'
        self.users = setup_roles()
        self.hr = self.users[Roles.HR]
        self.template = TaskTemplate.objects.create(
            title='Onboard junior',
            category='onboarding',
            target_role=Roles.JUNIOR,
            default_priority=Task.PRIORITY_HIGH,
            estimated_hours='4.00',
            checklist_items=['Sign NDA', 'Get card'],
            tags=['onboarding'],
            created_by=self.hr,
        )

    def test_create_template(self):
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.post(self.url, {
            'title': '  Weekly casino check ',
            'category': 'testing',
            'checklist_items': ['Deposit', 'Withdraw'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        template = TaskTemplate.objects.get(pk=response.data['template']['id'])
        self.assertEqual(template.title, 'Weekly casino check')
        self.assertEqual(template.default_priority, Task.PRIORITY_MEDIUM)
        self.assertEqual(template.created_by, self.users[Roles.TESTER])

        response = self.client.post(self.url, {'title': 'No category'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Title and category are required')

    def test_list_filters_and_hides_inactive(self):
        TaskTemplate.objects.create(title='Audit', category='finance', created_by=self.hr)
        TaskTemplate.objects.create(title='Old', category='onboarding', is_active=False, created_by=self.hr)
        self.client.force_authenticate(user=self.users[Roles.MANAGER])

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        response = self.client.get(self.url, {'category': 'onboarding', 'role': 'junior'})
        self.assertEqual([t['title'] for t in response.data['results']], ['Onboard junior'])

    def test_teamlead_and_junior_denied(self):
        for role in (Roles.TEAMLEAD, Roles.JUNIOR):
            self.client.force_authenticate(user=self.users[role])
            self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_only_creator_or_admin_edits(self):
        url = f'{self.url}{self.template.pk}/'
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.patch(url, {'title': 'Taken over'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.hr)
        response = self.client.patch(url, {'tags': ['onboarding', 'kyc']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.patch(url, {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.template.refresh_from_db()
        self.assertEqual(self.template.tags, ['onboarding', 'kyc'])
        self.assertFalse(self.template.is_active)

    def test_create_task_from_template(self):
        junior = self.users[Roles.JUNIOR]
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(
            f'{self.url}{self.template.pk}/create-task/',
            {'assignee_id': junior.pk, 'additional_tags': ['urgent']},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        task = Task.objects.get(pk=response.data['task']['id'])
        self.assertEqual(task.title, 'Onboard junior')
        self.assertEqual(task.template, self.template)
        self.assertEqual(task.priority, Task.PRIORITY_HIGH)
        self.assertEqual(task.team_lead, self.users[Roles.TEAMLEAD])
        self.assertEqual(task.tags, ['onboarding', 'urgent'])
        self.assertEqual(
            list(task.checklist_items.values_list('title', flat=True)),
            ['Sign NDA', 'Get card']
        )
        self.assertTrue(Notification.objects.filter(user=junior, type='task').exists())

    def test_create_task_overrides_and_checks(self):
        url = f'{self.url}{self.template.pk}/create-task/'
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.post(url, {'custom_title': 'Onboard Sam', 'custom_priority': 'low'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['task']['title'], 'Onboard Sam')
        self.assertEqual(response.data['task']['priority'], 'low')

        inactive = create_user(Roles.HR, status=UserStatus.INACTIVE)
        response = self.client.post(url, {'assignee_id': inactive.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid assignee')

        self.template.is_active = False
        self.template.save()
        self.assertEqual(self.client.post(url, {}, format='json').status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        self.assertEqual(self.client.post(url, {}, format='json').status_code, status.HTTP_403_FORBIDDEN)
