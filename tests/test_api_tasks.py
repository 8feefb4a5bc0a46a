"""Tests for task CRUD, drag-and-drop moves and the audit trail."""

import pytest


def titles(client, column):
    return [task['title'] for task in client.get(f"/api/columns/{column['id']}/tasks").get_json()]


def positions(client, column):
    return [task['position'] for task in client.get(f"/api/columns/{column['id']}/tasks").get_json()]


@pytest.fixture
def filled(columns, make_task):
    """Three tasks in To Do, two in In Progress."""
    todo, doing = columns[0], columns[1]
    return {
        'todo': [make_task(todo, title) for title in ('one', 'two', 'three')],
        'doing': [make_task(doing, title) for title in ('four', 'five')],
    }


class TestCreate:

    def test_create_appends_to_column(self, client, columns, filled):
        assert titles(client, columns[0]) == ['one', 'two', 'three']
        assert positions(client, columns[0]) == [0, 1, 2]

    def test_defaults(self, columns, make_task):
        task = make_task(columns[0], 'plain')
        assert task['priority'] == 'medium'
        assert task['status'] == 'todo'
        assert task['creator']['name'] == 'alice'
        assert task['completed_at'] is None

    def test_all_fields(self, columns, make_task):
        task = make_task(columns[0], 'full', description='details', priority='urgent',
                         status='done', deadline='2030-05-01T09:30')
        assert task['priority'] == 'urgent'
        assert task['deadline'] == '2030-05-01T09:30:00'
        assert task['completed_at'] is not None
        assert task['is_overdue'] is False

    def test_title_required(self, client, board, columns):
        resp = client.post('/api/tasks', json={'board_id': board['id'], 'column_id': columns[0]['id']})
        assert resp.status_code == 400
        assert resp.get_json()['error'].startswith('Title:')

    def test_bad_priority(self, client, board, columns):
        resp = client.post('/api/tasks', json={'board_id': board['id'], 'column_id': columns[0]['id'],
                                               'title': 'x', 'priority': 'whenever'})
        assert resp.status_code == 400

    def test_column_must_belong_to_board(self, client, project, columns):
        other = client.post(f"/api/projects/{project['id']}/boards", json={'name': 'Other'}).get_json()
        resp = client.post('/api/tasks', json={'board_id': other['id'], 'column_id': columns[0]['id'],
                                               'title': 'misplaced'})
        assert resp.status_code == 404

    def test_assignee_must_be_member(self, client, other_client, board, columns):
        bob = other_client.get('/auth/me').get_json()
        resp = client.post('/api/tasks', json={'board_id': board['id'], 'column_id': columns[0]['id'],
                                               'title': 'for bob', 'assignee_id': bob['id']})
        assert resp.status_code == 400

    def test_member_can_create_and_be_assigned(self, client, other_client, project, board, columns):
        client.post(f"/api/projects/{project['id']}/invite", json={'email': 'bob@example.com'})
        bob = other_client.get('/auth/me').get_json()
        resp = other_client.post('/api/tasks', json={'board_id': board['id'], 'column_id': columns[0]['id'],
                                                     'title': 'mine', 'assignee_id': bob['id']})
        assert resp.status_code == 201
        assert resp.get_json()['assignee']['name'] == 'bob'

    def test_outsider_cannot_see_task(self, other_client, filled):
        assert other_client.get(f"/api/tasks/{filled['todo'][0]['id']}").status_code == 404


class TestUpdate:

    def test_fields(self, client, filled):
        task = filled['todo'][0]
        resp = client.patch(f"/api/tasks/{task['id']}", json={'title': 'renamed', 'priority': 'high'})
        assert resp.status_code == 200
        assert resp.get_json()['title'] == 'renamed'
        assert resp.get_json()['priority'] == 'high'

    def test_blank_title(self, client, filled):
        task_id = filled['todo'][0]['id']
        for title in ('', '   '):
            resp = client.patch(f'/api/tasks/{task_id}', json={'title': title})
            assert resp.status_code == 400
            assert resp.get_json()['error'].startswith('Title:')
        assert client.get(f'/api/tasks/{task_id}').get_json()['title'] == 'one'

    def test_update_without_title_keeps_it(self, client, filled):
        task_id = filled['todo'][0]['id']
        resp = client.patch(f'/api/tasks/{task_id}', json={'description': 'more detail'})
        assert resp.status_code == 200
        assert resp.get_json()['title'] == 'one'

    def test_clear_deadline(self, client, columns, make_task):
        task = make_task(columns[0], 'due', deadline='2030-01-01')
        resp = client.patch(f"/api/tasks/{task['id']}", json={'deadline': None})
        assert resp.get_json()['deadline'] is None

    def test_status_done_and_back(self, client, filled):
        task = filled['todo'][0]
        done = client.patch(f"/api/tasks/{task['id']}", json={'status': 'done'}).get_json()
        assert done['completed_at'] is not None
        reopened = client.patch(f"/api/tasks/{task['id']}", json={'status': 'todo'}).get_json()
        assert reopened['completed_at'] is None

    def test_move_with_update(self, client, columns, filled):
        task = filled['todo'][0]
        resp = client.patch(f"/api/tasks/{task['id']}", json={'column_id': columns[1]['id']})
        assert resp.get_json()['column_id'] == columns[1]['id']
        assert titles(client, columns[1]) == ['four', 'five', 'one']
        assert positions(client, columns[0]) == [0, 1]


class TestPosition:

    def test_move_to_other_column(self, client, columns, filled):
        task = filled['todo'][0]
        resp = client.patch(f"/api/tasks/{task['id']}/position",
                            json={'column_id': columns[1]['id'], 'position': 1})
        assert resp.status_code == 200
        assert resp.get_json()['position'] == 1
        assert titles(client, columns[0]) == ['two', 'three']
        assert titles(client, columns[1]) == ['four', 'one', 'five']
        assert positions(client, columns[0]) == [0, 1]
        assert positions(client, columns[1]) == [0, 1, 2]

    def test_move_down_within_column(self, client, columns, filled):
        task = filled['todo'][0]
        client.patch(f"/api/tasks/{task['id']}/position", json={'column_id': columns[0]['id'], 'position': 2})
        assert titles(client, columns[0]) == ['two', 'three', 'one']

    def test_move_up_within_column(self, client, columns, filled):
        task = filled['todo'][2]
        client.patch(f"/api/tasks/{task['id']}/position", json={'column_id': columns[0]['id'], 'position': 0})
        assert titles(client, columns[0]) == ['three', 'one', 'two']

    def test_position_past_end_is_clamped(self, client, columns, filled):
        task = filled['todo'][1]
        resp = client.patch(f"/api/tasks/{task['id']}/position",
                            json={'column_id': columns[1]['id'], 'position': 99})
        assert resp.get_json()['position'] == 2
        assert titles(client, columns[1]) == ['four', 'five', 'two']

    def test_missing_position_appends(self, client, columns, filled):
        task = filled['doing'][0]
        client.patch(f"/api/tasks/{task['id']}/position", json={'column_id': columns[0]['id']})
        assert titles(client, columns[0]) == ['one', 'two', 'three', 'four']

    def test_into_empty_column(self, client, columns, filled):
        task = filled['todo'][1]
        resp = client.patch(f"/api/tasks/{task['id']}/position",
                            json={'column_id': columns[3]['id'], 'position': 0})
        assert resp.get_json()['position'] == 0
        assert titles(client, columns[3]) == ['two']

    def test_into_other_board_of_same_project(self, client, project, filled):
        other = client.post(f"/api/projects/{project['id']}/boards", json={'name': 'Other'}).get_json()
        task = filled['todo'][0]
        resp = client.patch(f"/api/tasks/{task['id']}/position",
                            json={'column_id': other['columns'][0]['id'], 'position': 0})
        assert resp.get_json()['board_id'] == other['id']

    def test_rejects_bad_input(self, client, columns, filled):
        url = f"/api/tasks/{filled['todo'][0]['id']}/position"
        assert client.patch(url, json={'position': 0}).status_code == 400
        assert client.patch(url, json={'column_id': 'abc', 'position': 0}).status_code == 400
        assert client.patch(url, json={'column_id': columns[0]['id'], 'position': -3}).status_code == 400
        assert client.patch(url, json={'column_id': columns[0]['id'], 'position': 'first'}).status_code == 400
        assert titles(client, columns[0]) == ['one', 'two', 'three']

    def test_column_of_another_project(self, client, other_client, filled):
        foreign_project = other_client.get('/api/projects').get_json()[0]
        foreign = other_client.get(f"/api/projects/{foreign_project['id']}").get_json()
        foreign_columns = other_client.get(f"/api/boards/{foreign['boards'][0]['id']}/columns").get_json()
        resp = client.patch(f"/api/tasks/{filled['todo'][0]['id']}/position",
                            json={'column_id': foreign_columns[0]['id'], 'position': 0})
        assert resp.status_code == 404

    def test_positions_stay_contiguous(self, client, columns, filled):
        moves = [('todo', 0, 1, 0), ('doing', 1, 2, 5), ('todo', 2, 1, 1),
                 ('doing', 0, 0, 0), ('todo', 1, 3, 0)]
        for group, index, column_index, position in moves:
            task = filled[group][index]
            client.patch(f"/api/tasks/{task['id']}/position",
                         json={'column_id': columns[column_index]['id'], 'position': position})
            for column in columns:
                assert positions(client, column) == list(range(len(positions(client, column))))
        assert sum(len(titles(client, column)) for column in columns) == 5

    def test_last_write_wins(self, client, columns, filled):
        task = filled['todo'][0]
        client.patch(f"/api/tasks/{task['id']}/position", json={'column_id': columns[1]['id'], 'position': 0})
        client.patch(f"/api/tasks/{task['id']}/position", json={'column_id': columns[2]['id'], 'position': 0})
        assert client.get(f"/api/tasks/{task['id']}").get_json()['column_id'] == columns[2]['id']
        assert 'one' not in titles(client, columns[1])


class TestDelete:

    def test_delete_closes_gap(self, client, columns, filled):
        assert client.delete(f"/api/tasks/{filled['todo'][1]['id']}").status_code == 204
        assert titles(client, columns[0]) == ['one', 'three']
        assert positions(client, columns[0]) == [0, 1]

    def test_deleted_task_is_gone(self, client, filled):
        task_id = filled['todo'][0]['id']
        client.delete(f'/api/tasks/{task_id}')
        assert client.get(f'/api/tasks/{task_id}').status_code == 404


class TestHistory:

    def test_created_entry(self, client, filled):
        history = client.get(f"/api/tasks/{filled['todo'][0]['id']}/history").get_json()
        assert [entry['action'] for entry in history] == ['created']
        assert history[0]['description'] == 'Task created'

    def test_updates_are_tracked_per_field(self, client, filled):
        task_id = filled['todo'][0]['id']
        client.patch(f'/api/tasks/{task_id}', json={'title': 'renamed', 'priority': 'low'})
        history = client.get(f'/api/tasks/{task_id}/history').get_json()
        changed = {entry['field_name'] for entry in history if entry['action'] == 'updated'}
        assert changed == {'title', 'priority'}
        title_entry = next(entry for entry in history if entry['field_name'] == 'title')
        assert title_entry['description'] == "Changed title from 'one' to 'renamed'"

    def test_moves_are_tracked(self, client, columns, filled):
        task_id = filled['todo'][0]['id']
        client.patch(f'/api/tasks/{task_id}/position', json={'column_id': columns[1]['id'], 'position': 0})
        history = client.get(f'/api/tasks/{task_id}/history').get_json()
        assert history[0]['action'] == 'moved'
        assert history[0]['new_value'] == f"column {columns[1]['id']} #0"

    def test_noop_move_is_not_tracked(self, client, columns, filled):
        task_id = filled['todo'][0]['id']
        client.patch(f'/api/tasks/{task_id}/position', json={'column_id': columns[0]['id'], 'position': 0})
        history = client.get(f'/api/tasks/{task_id}/history').get_json()
        assert [entry['action'] for entry in history] == ['created']
