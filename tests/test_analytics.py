"""Tests for the analytics overview."""

from taskflow.blueprints.analytics import summarize


def test_empty_summary():
    summary = summarize([])
    assert summary['total'] == 0
    assert summary['completion_rate'] == 0
    assert summary['by_status'] == {'todo': 0, 'in_progress': 0, 'review': 0, 'done': 0}


class TestOverview:

    def test_counts(self, client, columns, make_task):
        make_task(columns[0], 'late', deadline='2020-01-01T00:00:00')
        make_task(columns[1], 'urgent', priority='urgent', status='in_progress')
        make_task(columns[3], 'finished', status='done', deadline='2020-01-01')

        summary = client.get('/api/analytics').get_json()

        assert summary['total'] == 3
        assert summary['by_status']['done'] == 1
        assert summary['by_status']['in_progress'] == 1
        assert summary['by_priority']['urgent'] == 1
        assert summary['by_priority']['medium'] == 2
        assert summary['by_project'] == {"alice's Project": 3}
        # Done tasks are never overdue
        assert summary['overdue'] == 1
        assert [task['title'] for task in summary['overdue_tasks']] == ['late']
        assert summary['created_this_week'] == 3
        assert summary['completed_this_week'] == 1
        assert summary['completion_rate'] == 33.3

    def test_single_project(self, client, columns, make_task):
        make_task(columns[0], 'counted')
        other = client.post('/api/projects', json={'name': 'Side project'}).get_json()
        summary = client.get(f"/api/analytics?project_id={other['id']}").get_json()
        assert summary['total'] == 0

    def test_only_visible_projects(self, client, other_client, columns, make_task):
        make_task(columns[0], 'private')
        assert other_client.get('/api/analytics').get_json()['total'] == 0

    def test_foreign_project(self, other_client, project):
        resp = other_client.get(f"/api/analytics?project_id={project['id']}")
        assert resp.status_code == 404
