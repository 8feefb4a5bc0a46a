from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional
from taskflow import db
from taskflow.errors import NotFoundError, ValidationError
from taskflow.models import Project, ProjectMember, Board, User
from taskflow.utils.access import get_project_or_404, accessible_project_ids
from taskflow.utils.positions import next_position, apply_order
from taskflow.utils.validation import JsonForm, validate_json, get_json, not_blank

projects_bp = Blueprint('projects', __name__)

class ProjectForm(JsonForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    description = TextAreaField('Description', validators=[Optional()])

class ProjectUpdateForm(JsonForm):
    name = StringField('Name', validators=[not_blank, Length(max=100)])
    description = TextAreaField('Description', validators=[Optional()])

class InviteForm(JsonForm):
    email = StringField('Email', validators=[DataRequired(), Email()])

class BoardForm(JsonForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    description = TextAreaField('Description', validators=[Optional()])
    background_color = StringField('Background color', validators=[Optional(), Length(max=7)])

@projects_bp.route('', methods=['GET'])
@login_required
def list_projects():
    project_ids = accessible_project_ids(current_user)
    projects = Project.query.filter(Project.id.in_(project_ids)) \
        .order_by(Project.updated_at.desc()).all()
    return jsonify([project.to_dict() for project in projects])

@projects_bp.route('', methods=['POST'])
@login_required
def create_project():
    form, _ = validate_json(ProjectForm)
    project = Project(
        name=form.name.data,
        description=form.description.data or None,
        owner_id=current_user.id
    )
    project.members.append(ProjectMember(user_id=current_user.id, role='owner'))
    db.session.add(project)
    db.session.commit()

    current_app.logger.info('Project %s created by %s', project.id, current_user.username)
    return jsonify(project.to_dict()), 201

@projects_bp.route('/<int:project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    project = get_project_or_404(project_id)
    data = project.to_dict()
    data['boards'] = [board.to_dict(include_columns=False) for board in project.boards]
    return jsonify(data)

@projects_bp.route('/<int:project_id>', methods=['PATCH'])
@login_required
def update_project(project_id):
    project = get_project_or_404(project_id, owner_only=True)
    form, data = validate_json(ProjectUpdateForm)

    if 'name' in data:
        project.name = form.name.data
    if 'description' in data:
        project.description = form.description.data or None
    db.session.commit()
    return jsonify(project.to_dict())

@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    project = get_project_or_404(project_id, owner_only=True)
    db.session.delete(project)
    db.session.commit()
    current_app.logger.info('Project %s deleted by %s', project_id, current_user.username)
    return '', 204

@projects_bp.route('/<int:project_id>/invite', methods=['POST'])
@login_required
def invite_member(project_id):
    project = get_project_or_404(project_id, manage=True)
    form, _ = validate_json(InviteForm)

    invited_user = User.query.filter_by(email=form.email.data).first()
    if invited_user is None:
        raise NotFoundError('No user with that email exists')

    if invited_user.id == project.owner_id or project.get_member(invited_user):
        raise ValidationError('User is already a member of this project')

    member = ProjectMember(project_id=project.id, user_id=invited_user.id, role='member')
    db.session.add(member)
    db.session.commit()
    return jsonify({'message': 'Member added', 'member': member.to_dict()}), 201

@projects_bp.route('/<int:project_id>/members/<int:user_id>', methods=['DELETE'])
@login_required
def remove_member(project_id, user_id):
    project = get_project_or_404(project_id, manage=True)
    if project.owner_id == user_id:
        raise ValidationError('The project owner cannot be removed')

    ProjectMember.query.filter_by(project_id=project.id, user_id=user_id).delete()
    db.session.commit()
    return '', 204

@projects_bp.route('/<int:project_id>/boards', methods=['GET'])
@login_required
def list_boards(project_id):
    project = get_project_or_404(project_id)
    return jsonify([board.to_dict() for board in project.boards])

@projects_bp.route('/<int:project_id>/boards', methods=['POST'])
@login_required
def create_board(project_id):
    project = get_project_or_404(project_id, manage=True)
    form, _ = validate_json(BoardForm)

    board = Board(
        project_id=project.id,
        name=form.name.data,
        description=form.description.data or None,
        background_color=form.background_color.data or None,
        position=next_position(Board, 'project_id', project.id)
    )
    board.add_default_columns()
    db.session.add(board)
    db.session.commit()
    return jsonify(board.to_dict()), 201

@projects_bp.route('/<int:project_id>/boards/order', methods=['PUT'])
@login_required
def reorder_boards(project_id):
    """Set the order of every board in a project in one transaction"""
    project = get_project_or_404(project_id, manage=True)
    data = get_json()
    boards = apply_order(Board, 'project_id', project.id, data.get('board_ids'))
    db.session.commit()
    return jsonify([board.to_dict() for board in boards])
