"""Tests for board and column endpoints, including their ordering."""

import pytest


def board_names(client, project):
    return [board['name'] for board in client.get(f"/api/projects/{project['id']}/boards").get_json()]


def board_positions(client, project):
    return [board['position'] for board in client.get(f"/api/projects/{project['id']}/boards").get_json()]


def column_names(client, board):
    return [column['name'] for column in client.get(f"/api/boards/{board['id']}/columns").get_json()]


@pytest.fixture
def three_boards(client, project):
    for name in ('Second', 'Third'):
        resp = client.post(f"/api/projects/{project['id']}/boards", json={'name': name})
        assert resp.status_code == 201
    return client.get(f"/api/projects/{project['id']}/boards").get_json()


class TestBoards:

    def test_default_columns(self, board):
        assert [column['name'] for column in board['columns']] == ['To Do', 'In Progress', 'Review', 'Done']
        assert [column['position'] for column in board['columns']] == [0, 1, 2, 3]
        assert board['columns'][1]['color'] == '#0052cc'

    def test_new_board_is_appended(self, client, project, three_boards):
        assert [board['position'] for board in three_boards] == [0, 1, 2]
        assert len(three_boards[2]['columns']) == 4

    def test_board_includes_tasks(self, client, board, columns, make_task):
        make_task(columns[2], 'in review')
        detail = client.get(f"/api/boards/{board['id']}").get_json()
        assert [task['title'] for task in detail['tasks']] == ['in review']

    def test_update(self, client, board):
        resp = client.patch(f"/api/boards/{board['id']}",
                            json={'name': 'Sprint 1', 'background_color': '#ffffff'})
        assert resp.status_code == 200
        assert resp.get_json()['name'] == 'Sprint 1'
        assert resp.get_json()['background_color'] == '#ffffff'

    def test_blank_name(self, client, board):
        resp = client.patch(f"/api/boards/{board['id']}", json={'name': ' '})
        assert resp.status_code == 400
        assert client.get(f"/api/boards/{board['id']}").get_json()['name'] == 'Main board'

    def test_move_by_position(self, client, project, three_boards):
        resp = client.patch(f"/api/boards/{three_boards[0]['id']}", json={'position': 2})
        assert resp.get_json()['position'] == 2
        assert board_names(client, project) == ['Second', 'Third', 'Main board']
        assert board_positions(client, project) == [0, 1, 2]

    def test_position_is_clamped(self, client, project, three_boards):
        client.patch(f"/api/boards/{three_boards[0]['id']}", json={'position': 50})
        assert board_names(client, project) == ['Second', 'Third', 'Main board']

    def test_cannot_change_project(self, client, project, three_boards):
        other = client.post('/api/projects', json={'name': 'Other'}).get_json()
        resp = client.patch(f"/api/boards/{three_boards[0]['id']}",
                            json={'project_id': other['id'], 'position': 0})
        assert resp.status_code == 400

    def test_negative_position(self, client, board):
        resp = client.patch(f"/api/boards/{board['id']}", json={'position': -1})
        assert resp.status_code == 400

    def test_reorder_all(self, client, project, three_boards):
        ids = [board['id'] for board in three_boards]
        resp = client.put(f"/api/projects/{project['id']}/boards/order",
                          json={'board_ids': [ids[2], ids[0], ids[1]]})
        assert resp.status_code == 200
        assert [board['name'] for board in resp.get_json()] == ['Third', 'Main board', 'Second']
        assert board_positions(client, project) == [0, 1, 2]

    @pytest.mark.parametrize('board_ids', [
        None,
        'all',
        [True, False, True],
    ])
    def test_reorder_rejects_malformed_order(self, client, project, three_boards, board_ids):
        resp = client.put(f"/api/projects/{project['id']}/boards/order", json={'board_ids': board_ids})
        assert resp.status_code == 400

    def test_reorder_rejects_partial_order(self, client, project, three_boards):
        ids = [board['id'] for board in three_boards]
        resp = client.put(f"/api/projects/{project['id']}/boards/order", json={'board_ids': ids[:2]})
        assert resp.status_code == 400
        resp = client.put(f"/api/projects/{project['id']}/boards/order",
                          json={'board_ids': [ids[0], ids[0], ids[1]]})
        assert resp.status_code == 400
        assert board_names(client, project) == ['Main board', 'Second', 'Third']

    def test_delete_closes_gap(self, client, project, three_boards):
        assert client.delete(f"/api/boards/{three_boards[1]['id']}").status_code == 204
        assert board_names(client, project) == ['Main board', 'Third']
        assert board_positions(client, project) == [0, 1]

    def test_hidden_from_other_users(self, other_client, board):
        assert other_client.get(f"/api/boards/{board['id']}").status_code == 404
        assert other_client.delete(f"/api/boards/{board['id']}").status_code == 404


class TestColumns:

    def test_create_appends(self, client, board):
        resp = client.post(f"/api/boards/{board['id']}/columns", json={'name': 'Blocked'})
        assert resp.status_code == 201
        assert resp.get_json()['position'] == 4
        assert resp.get_json()['color'] == '#8993a4'

    def test_name_required(self, client, board):
        resp = client.post(f"/api/boards/{board['id']}/columns", json={'color': '#000000'})
        assert resp.status_code == 400

    def test_rename(self, client, columns):
        resp = client.patch(f"/api/columns/{columns[0]['id']}", json={'name': 'Backlog'})
        assert resp.get_json()['name'] == 'Backlog'

    def test_blank_name(self, client, board, columns):
        resp = client.patch(f"/api/columns/{columns[0]['id']}", json={'name': ''})
        assert resp.status_code == 400
        assert column_names(client, board)[0] == 'To Do'

    def test_move_by_position(self, client, board, columns):
        resp = client.patch(f"/api/columns/{columns[3]['id']}",
                            json={'board_id': board['id'], 'position': 0})
        assert resp.status_code == 200
        assert column_names(client, board) == ['Done', 'To Do', 'In Progress', 'Review']

    def test_cannot_change_board(self, client, project, board, columns, three_boards):
        resp = client.patch(f"/api/columns/{columns[0]['id']}",
                            json={'board_id': three_boards[1]['id'], 'position': 0})
        assert resp.status_code == 400

    def test_reorder_all(self, client, board, columns):
        ids = [column['id'] for column in columns]
        resp = client.put(f"/api/boards/{board['id']}/columns/order", json={'column_ids': ids[::-1]})
        assert resp.status_code == 200
        assert column_names(client, board) == ['Done', 'Review', 'In Progress', 'To Do']

    def test_delete_empty_column_closes_gap(self, client, board, columns):
        assert client.delete(f"/api/columns/{columns[1]['id']}").status_code == 204
        listed = client.get(f"/api/boards/{board['id']}/columns").get_json()
        assert [column['name'] for column in listed] == ['To Do', 'Review', 'Done']
        assert [column['position'] for column in listed] == [0, 1, 2]

    def test_cannot_delete_column_with_tasks(self, client, columns, make_task):
        make_task(columns[0], 'still here')
        resp = client.delete(f"/api/columns/{columns[0]['id']}")
        assert resp.status_code == 400

    def test_member_cannot_restructure(self, client, other_client, project, board, columns):
        client.post(f"/api/projects/{project['id']}/invite", json={'email': 'bob@example.com'})
        assert other_client.get(f"/api/boards/{board['id']}/columns").status_code == 200
        resp = other_client.post(f"/api/boards/{board['id']}/columns", json={'name': 'Mine'})
        assert resp.status_code == 404
        ids = [column['id'] for column in columns]
        resp = other_client.put(f"/api/boards/{board['id']}/columns/order", json={'column_ids': ids})
        assert resp.status_code == 404
