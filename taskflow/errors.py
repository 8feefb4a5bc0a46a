class TaskflowError(Exception):
    """Base error for the reorder protocol and the JSON API"""
    status_code = 500
    message = 'Something went wrong'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(TaskflowError):
    """Malformed input, e.g. a reorder target that makes no sense"""
    status_code = 400
    message = 'Invalid request'


class NotFoundError(TaskflowError):
    """Item or container vanished, or the caller has no access to it"""
    status_code = 404
    message = 'Not found'


class NetworkError(TaskflowError):
    """Transport failure talking to the persistence layer"""
    status_code = 502
    message = 'Network error'


class ConflictError(TaskflowError):
    # Reserved. Reorders are last-write-wins, so nothing raises this today.
    status_code = 409
    message = 'Conflicting update'


class DragInProgressError(ValidationError):
    message = 'Another drag is already in progress'
