from flask import Blueprint, jsonify
from flask_login import login_required
from wtforms import StringField, IntegerField
from wtforms.validators import Length, Optional, NumberRange
from taskflow import db
from taskflow.errors import ValidationError
from taskflow.models import BoardColumn
from taskflow.utils.access import get_column_or_404
from taskflow.utils.positions import move_to_position, close_gap
from taskflow.utils.validation import JsonForm, validate_json, not_blank

columns_bp = Blueprint('columns', __name__)

class ColumnUpdateForm(JsonForm):
    name = StringField('Name', validators=[not_blank, Length(max=100)])
    color = StringField('Color', validators=[Optional(), Length(max=7)])
    board_id = IntegerField('Board', validators=[Optional()])
    position = IntegerField('Position', validators=[Optional(), NumberRange(min=0)])

@columns_bp.route('/<int:column_id>', methods=['PATCH'])
@login_required
def update_column(column_id):
    column = get_column_or_404(column_id, manage=True)
    form, data = validate_json(ColumnUpdateForm)

    if 'name' in data:
        column.name = form.name.data
    if 'color' in data and form.color.data:
        column.color = form.color.data

    if form.position.data is not None:
        if form.board_id.data is not None and form.board_id.data != column.board_id:
            raise ValidationError('Columns cannot be moved to another board')
        move_to_position(column, 'board_id', column.board_id, form.position.data)

    db.session.commit()
    return jsonify(column.to_dict())

@columns_bp.route('/<int:column_id>', methods=['DELETE'])
@login_required
def delete_column(column_id):
    column = get_column_or_404(column_id, manage=True)
    if column.tasks.count() > 0:
        raise ValidationError('Cannot delete a column that still has tasks. Move them first.')

    board_id = column.board_id
    db.session.delete(column)
    db.session.flush()
    close_gap(BoardColumn, 'board_id', board_id, column_id)
    db.session.commit()
    return '', 204

@columns_bp.route('/<int:column_id>/tasks', methods=['GET'])
@login_required
def list_tasks(column_id):
    """Tasks of a column, ascending by position"""
    column = get_column_or_404(column_id)
    return jsonify([task.to_dict() for task in column.tasks])
