from flask_login import current_user
from taskflow import db
from taskflow.errors import NotFoundError
from taskflow.models import Project, Board, BoardColumn, Task


def get_project_or_404(project_id, manage=False, owner_only=False):
    project = db.session.get(Project, project_id)
    if project is None or not project.has_access(current_user):
        raise NotFoundError('Project not found or access denied')
    if owner_only and project.owner_id != current_user.id:
        raise NotFoundError('Project not found or access denied')
    if manage and not project.can_manage(current_user):
        raise NotFoundError('Project not found or access denied')
    return project


def get_board_or_404(board_id, manage=False):
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFoundError('Board not found or access denied')
    project = board.project
    if not project.has_access(current_user) or (manage and not project.can_manage(current_user)):
        raise NotFoundError('Board not found or access denied')
    return board


def get_column_or_404(column_id, manage=False):
    column = db.session.get(BoardColumn, column_id)
    if column is None:
        raise NotFoundError('Column not found or access denied')
    project = column.board.project
    if not project.has_access(current_user) or (manage and not project.can_manage(current_user)):
        raise NotFoundError('Column not found or access denied')
    return column


def get_task_or_404(task_id):
    task = db.session.get(Task, task_id)
    if task is None or not task.board.project.has_access(current_user):
        raise NotFoundError('Task not found or access denied')
    return task


def accessible_project_ids(user):
    """Projects the user owns or is a member of"""
    from taskflow.models import ProjectMember
    member_ids = db.session.query(ProjectMember.project_id).filter_by(user_id=user.id)
    return [row.id for row in Project.query.filter(
        db.or_(Project.owner_id == user.id, Project.id.in_(member_ids))
    ).all()]
