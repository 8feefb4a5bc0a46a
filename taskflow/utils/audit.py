from flask import request
from flask_login import current_user
from taskflow import db
from taskflow.models.audit import TaskAudit

def log_task_action(task, action, field_name=None, old_value=None, new_value=None):
    """
    Log a task action to the audit trail

    Args:
        task: Task instance
        action: string describing the action (created, updated, moved, deleted)
        field_name: name of the field that was changed (for updates)
        old_value: previous value (for updates and moves)
        new_value: new value (for updates and moves)
    """
    audit_entry = TaskAudit(
        task_id=task.id,
        task_title=task.title,
        user_id=current_user.id,
        action=action,
        field_name=field_name,
        old_value=str(old_value) if old_value is not None else None,
        new_value=str(new_value) if new_value is not None else None,
        ip_address=request.environ.get('REMOTE_ADDR'),
        user_agent=request.environ.get('HTTP_USER_AGENT')
    )

    db.session.add(audit_entry)
    # Note: Don't commit here, let the calling function handle the transaction

def log_task_creation(task):
    """Log task creation"""
    log_task_action(task, 'created')

def log_task_update(task, field_name, old_value, new_value):
    """Log task field update"""
    if old_value != new_value:
        log_task_action(task, 'updated', field_name, old_value, new_value)

def log_task_move(task, old_column_id, old_position):
    """Log a drag-and-drop move"""
    if (old_column_id, old_position) != (task.column_id, task.position):
        log_task_action(task, 'moved', 'position',
                        f'column {old_column_id} #{old_position}',
                        f'column {task.column_id} #{task.position}')

def log_task_deletion(task):
    """Log task deletion"""
    log_task_action(task, 'deleted')

def compare_task_changes(old_task_data, new_task_data, task):
    """
    Compare old and new task data and log all changes

    Args:
        old_task_data: dict with old values
        new_task_data: dict with new values
        task: Task instance
    """
    fields_to_track = ['title', 'description', 'deadline', 'priority', 'status', 'assignee_id']

    for field in fields_to_track:
        old_value = old_task_data.get(field)
        new_value = new_task_data.get(field)

        # Special handling for deadline
        if field == 'deadline':
            old_value = old_value.isoformat() if old_value else None
            new_value = new_value.isoformat() if new_value else None

        if old_value != new_value:
            log_task_update(task, field, old_value, new_value)
