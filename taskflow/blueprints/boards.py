from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from wtforms import StringField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange
from taskflow import db
from taskflow.errors import ValidationError
from taskflow.models import Board, BoardColumn
from taskflow.utils.access import get_board_or_404
from taskflow.utils.positions import next_position, move_to_position, apply_order, close_gap
from taskflow.utils.validation import JsonForm, validate_json, get_json, not_blank

boards_bp = Blueprint('boards', __name__)

class BoardUpdateForm(JsonForm):
    name = StringField('Name', validators=[not_blank, Length(max=100)])
    description = TextAreaField('Description', validators=[Optional()])
    background_color = StringField('Background color', validators=[Optional(), Length(max=7)])
    project_id = IntegerField('Project', validators=[Optional()])
    position = IntegerField('Position', validators=[Optional(), NumberRange(min=0)])

class ColumnForm(JsonForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    color = StringField('Color', validators=[Optional(), Length(max=7)], default='#8993a4')

@boards_bp.route('/<int:board_id>', methods=['GET'])
@login_required
def get_board(board_id):
    board = get_board_or_404(board_id)
    return jsonify(board.to_dict(include_tasks=True))

@boards_bp.route('/<int:board_id>', methods=['PATCH'])
@login_required
def update_board(board_id):
    board = get_board_or_404(board_id, manage=True)
    form, data = validate_json(BoardUpdateForm)

    if 'name' in data:
        board.name = form.name.data
    if 'description' in data:
        board.description = form.description.data or None
    if 'background_color' in data:
        board.background_color = form.background_color.data or None

    if form.position.data is not None:
        # Boards never change project
        if form.project_id.data is not None and form.project_id.data != board.project_id:
            raise ValidationError('Boards cannot be moved to another project')
        move_to_position(board, 'project_id', board.project_id, form.position.data)

    db.session.commit()
    return jsonify(board.to_dict())

@boards_bp.route('/<int:board_id>', methods=['DELETE'])
@login_required
def delete_board(board_id):
    board = get_board_or_404(board_id, manage=True)
    project_id = board.project_id
    db.session.delete(board)
    db.session.flush()
    close_gap(Board, 'project_id', project_id, board_id)
    db.session.commit()
    current_app.logger.info('Board %s deleted by %s', board_id, current_user.username)
    return '', 204

@boards_bp.route('/<int:board_id>/columns', methods=['GET'])
@login_required
def list_columns(board_id):
    board = get_board_or_404(board_id)
    return jsonify([column.to_dict() for column in board.columns])

@boards_bp.route('/<int:board_id>/columns', methods=['POST'])
@login_required
def create_column(board_id):
    board = get_board_or_404(board_id, manage=True)
    form, _ = validate_json(ColumnForm)

    column = BoardColumn(
        board_id=board.id,
        name=form.name.data,
        color=form.color.data or '#8993a4',
        position=next_position(BoardColumn, 'board_id', board.id)
    )
    db.session.add(column)
    db.session.commit()
    return jsonify(column.to_dict()), 201

@boards_bp.route('/<int:board_id>/columns/order', methods=['PUT'])
@login_required
def reorder_columns(board_id):
    """
    Set the order of every column on a board in one transaction

    Body: {"column_ids": [3, 1, 2]}, the full desired order.
    """
    board = get_board_or_404(board_id, manage=True)
    data = get_json()
    columns = apply_order(BoardColumn, 'board_id', board.id, data.get('column_ids'))
    db.session.commit()
    current_app.logger.info('Board %s columns reordered by %s', board.id, current_user.username)
    return jsonify([column.to_dict() for column in columns])
