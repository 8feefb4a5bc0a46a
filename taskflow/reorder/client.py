import logging
from typing import List, Optional

import requests

from taskflow.errors import NetworkError, NotFoundError, TaskflowError, ValidationError
from taskflow.reorder.ordering import OrderedItem, item_from_record

logger = logging.getLogger(__name__)


class TaskflowClient:
    """Thin JSON client for the TaskFlow API"""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.csrf_token = None

    @classmethod
    def from_config(cls, base_url, config, session=None):
        """Build a client from a Flask config mapping"""
        return cls(base_url, session=session, timeout=config.get('REORDER_HTTP_TIMEOUT', 10))

    def request(self, method, path, json=None):
        url = f'{self.base_url}{path}'
        headers = {'X-CSRFToken': self.csrf_token} if self.csrf_token else {}
        try:
            response = self.session.request(method, url, json=json, headers=headers,
                                            timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('%s %s failed: %s', method, url, e)
            raise NetworkError(str(e)) from e

        if response.status_code >= 400:
            raise self._error_for(response)
        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as e:
            # requests' JSONDecodeError is a ValueError
            logger.warning('%s %s returned a non-JSON body', method, url)
            raise NetworkError(f'Unreadable response from {path}') from e

    def _error_for(self, response):
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get('error') if isinstance(body, dict) else None
        status = response.status_code
        if status == 400:
            return ValidationError(message)
        if status in (401, 403, 404):
            return NotFoundError(message)
        if status >= 500:
            return NetworkError(message or f'Server error {status}')
        return TaskflowError(message, status_code=status)

    def fetch_csrf_token(self):
        self.csrf_token = self.request('GET', '/auth/csrf-token')['csrf_token']
        return self.csrf_token

    def login(self, username, password):
        if self.csrf_token is None:
            self.fetch_csrf_token()
        return self.request('POST', '/auth/login', json={'username': username, 'password': password})


def _item(record, container_key) -> OrderedItem:
    try:
        return item_from_record(record, container_key)
    except (KeyError, TypeError) as e:
        raise NetworkError(f'Malformed record in response: {record!r}') from e


def _items(records, container_key) -> List[OrderedItem]:
    if not isinstance(records, list):
        raise NetworkError('Expected a list of records in response')
    return [_item(record, container_key) for record in records]


class TaskPositionStore:
    """Tasks inside columns"""

    def __init__(self, client: TaskflowClient):
        self.client = client

    def update_item_position(self, item_id, container_id, position) -> OrderedItem:
        record = self.client.request('PATCH', f'/api/tasks/{item_id}/position',
                                     json={'column_id': container_id, 'position': position})
        return _item(record, 'column_id')

    def list_items_by_container(self, container_id) -> List[OrderedItem]:
        records = self.client.request('GET', f'/api/columns/{container_id}/tasks')
        return _items(records, 'column_id')


class ColumnPositionStore:
    """Columns inside a board"""

    def __init__(self, client: TaskflowClient):
        self.client = client

    def update_item_position(self, item_id, container_id, position) -> OrderedItem:
        record = self.client.request('PATCH', f'/api/columns/{item_id}',
                                     json={'board_id': container_id, 'position': position})
        return _item(record, 'board_id')

    def list_items_by_container(self, container_id) -> List[OrderedItem]:
        records = self.client.request('GET', f'/api/boards/{container_id}/columns')
        return _items(records, 'board_id')

    def reorder_container(self, container_id, ordered_ids) -> List[OrderedItem]:
        records = self.client.request('PUT', f'/api/boards/{container_id}/columns/order',
                                      json={'column_ids': list(ordered_ids)})
        return _items(records, 'board_id')


class BoardPositionStore:
    """Boards inside a project"""

    def __init__(self, client: TaskflowClient):
        self.client = client

    def update_item_position(self, item_id, container_id, position) -> OrderedItem:
        record = self.client.request('PATCH', f'/api/boards/{item_id}',
                                     json={'project_id': container_id, 'position': position})
        return _item(record, 'project_id')

    def list_items_by_container(self, container_id) -> List[OrderedItem]:
        records = self.client.request('GET', f'/api/projects/{container_id}/boards')
        return _items(records, 'project_id')

    def reorder_container(self, container_id, ordered_ids) -> List[OrderedItem]:
        records = self.client.request('PUT', f'/api/projects/{container_id}/boards/order',
                                      json={'board_ids': list(ordered_ids)})
        return _items(records, 'project_id')
