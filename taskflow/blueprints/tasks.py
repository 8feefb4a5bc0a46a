from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from wtforms import StringField, TextAreaField, DateTimeField, SelectField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange
from taskflow import db
from taskflow.errors import NotFoundError, ValidationError
from taskflow.models import Task, User
from taskflow.models.task import PRIORITIES, STATUSES
from taskflow.utils.access import get_board_or_404, get_column_or_404, get_task_or_404
from taskflow.utils.audit import log_task_creation, compare_task_changes, log_task_move, log_task_deletion
from taskflow.utils.positions import next_position, move_to_position, close_gap
from taskflow.utils.validation import JsonForm, validate_json, not_blank

tasks_bp = Blueprint('tasks', __name__)

DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M:%S.%f', '%Y-%m-%dT%H:%M', '%Y-%m-%d']

class TaskForm(JsonForm):
    board_id = IntegerField('Board', validators=[DataRequired()])
    column_id = IntegerField('Column', validators=[DataRequired()])
    title = StringField('Title', validators=[
        DataRequired(),
        Length(max=200)
    ])
    description = TextAreaField('Description', validators=[Optional()])
    assignee_id = IntegerField('Assignee', validators=[Optional()])
    deadline = DateTimeField('Deadline', format=DATETIME_FORMATS, validators=[Optional()])
    priority = SelectField('Priority', choices=[
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent')
    ], default='medium', validators=[Optional()])
    status = SelectField('Status', choices=[
        ('todo', 'To Do'),
        ('in_progress', 'In Progress'),
        ('review', 'Review'),
        ('done', 'Done')
    ], default='todo', validators=[Optional()])

class TaskUpdateForm(JsonForm):
    title = StringField('Title', validators=[not_blank, Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
    assignee_id = IntegerField('Assignee', validators=[Optional()])
    deadline = DateTimeField('Deadline', format=DATETIME_FORMATS, validators=[Optional()])
    priority = SelectField('Priority', choices=[(p, p) for p in PRIORITIES], validators=[Optional()])
    status = SelectField('Status', choices=[(s, s) for s in STATUSES], validators=[Optional()])
    column_id = IntegerField('Column', validators=[Optional()])
    position = IntegerField('Position', validators=[Optional(), NumberRange(min=0)])

class PositionForm(JsonForm):
    column_id = IntegerField('Column', validators=[DataRequired()])
    position = IntegerField('Position', validators=[Optional(), NumberRange(min=0)])

def _check_assignee(project, assignee_id):
    if assignee_id is None:
        return None
    assignee = db.session.get(User, assignee_id)
    if assignee is None or not project.has_access(assignee):
        raise ValidationError('Assignee must be a member of the project')
    return assignee

def _move_task(task, column_id, position):
    """
    Put a task at ``position`` in ``column_id``

    Siblings in the source and target columns are renumbered so both
    stay 0..N-1. Without a position the task goes to the end of the column.
    """
    column = get_column_or_404(column_id)
    if column.board.project_id != task.board.project_id:
        raise NotFoundError('Column not found or access denied')

    old_column_id, old_position = task.column_id, task.position
    if position is None:
        position = next_position(Task, 'column_id', column.id)
        if column.id == task.column_id:
            position -= 1
    task.board_id = column.board_id
    move_to_position(task, 'column_id', column.id, position)
    log_task_move(task, old_column_id, old_position)

@tasks_bp.route('', methods=['POST'])
@login_required
def create_task():
    form, _ = validate_json(TaskForm)

    board = get_board_or_404(form.board_id.data)
    column = get_column_or_404(form.column_id.data)
    if column.board_id != board.id:
        raise NotFoundError('Column not found or does not belong to this board')
    _check_assignee(board.project, form.assignee_id.data)

    task = Task(
        title=form.title.data,
        description=form.description.data or None,
        board_id=board.id,
        column_id=column.id,
        creator_id=current_user.id,
        assignee_id=form.assignee_id.data,
        deadline=form.deadline.data,
        priority=form.priority.data or 'medium',
        position=next_position(Task, 'column_id', column.id)
    )
    task.set_status(form.status.data or 'todo')

    db.session.add(task)
    db.session.flush()  # Flush to get the task ID
    log_task_creation(task)
    db.session.commit()

    current_app.logger.info('Task %s created in column %s', task.id, column.id)
    return jsonify(task.to_dict()), 201

@tasks_bp.route('/<int:task_id>', methods=['GET'])
@login_required
def get_task(task_id):
    task = get_task_or_404(task_id)
    return jsonify(task.to_dict())

@tasks_bp.route('/<int:task_id>', methods=['PATCH'])
@login_required
def update_task(task_id):
    task = get_task_or_404(task_id)
    form, data = validate_json(TaskUpdateForm)

    # Capture old values for audit
    old_task_data = {
        'title': task.title,
        'description': task.description,
        'deadline': task.deadline,
        'priority': task.priority,
        'status': task.status,
        'assignee_id': task.assignee_id
    }

    if 'title' in data:
        task.title = form.title.data
    if 'description' in data:
        task.description = form.description.data or None
    if 'priority' in data and form.priority.data:
        task.priority = form.priority.data
    if 'deadline' in data:
        task.deadline = form.deadline.data
    if 'assignee_id' in data:
        _check_assignee(task.board.project, form.assignee_id.data)
        task.assignee_id = form.assignee_id.data
    if 'status' in data and form.status.data:
        task.set_status(form.status.data)

    new_task_data = {
        'title': task.title,
        'description': task.description,
        'deadline': task.deadline,
        'priority': task.priority,
        'status': task.status,
        'assignee_id': task.assignee_id
    }
    compare_task_changes(old_task_data, new_task_data, task)

    if form.column_id.data is not None or form.position.data is not None:
        _move_task(task, form.column_id.data or task.column_id, form.position.data)

    db.session.commit()
    return jsonify(task.to_dict())

@tasks_bp.route('/<int:task_id>/position', methods=['PATCH'])
@login_required
def update_task_position(task_id):
    """
    Drag-and-drop endpoint

    Body: {"column_id": <int>, "position": <int>}. The task is inserted at
    ``position`` among the other tasks of the column; both the source and
    the target column are renumbered. Last write wins.
    """
    task = get_task_or_404(task_id)
    form, _ = validate_json(PositionForm)
    _move_task(task, form.column_id.data, form.position.data)
    db.session.commit()

    current_app.logger.info('Task %s moved to column %s at %s by %s',
                            task.id, task.column_id, task.position, current_user.username)
    return jsonify(task.to_dict())

@tasks_bp.route('/<int:task_id>', methods=['DELETE'])
@login_required
def delete_task(task_id):
    task = get_task_or_404(task_id)
    column_id = task.column_id
    log_task_deletion(task)
    db.session.flush()  # Persist the entry so the delete below unlinks it
    db.session.delete(task)
    db.session.flush()
    close_gap(Task, 'column_id', column_id, task_id)
    db.session.commit()
    return '', 204

@tasks_bp.route('/<int:task_id>/history', methods=['GET'])
@login_required
def task_history(task_id):
    task = get_task_or_404(task_id)
    entries = sorted(task.audit_logs, key=lambda entry: (entry.timestamp, entry.id), reverse=True)
    return jsonify([entry.to_dict() for entry in entries])
