from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, EqualTo, Length, ValidationError, Optional
from taskflow import db
from taskflow.errors import ValidationError as RequestValidationError
from taskflow.models import User, Task, ProjectMember
from taskflow.utils.validation import JsonForm, validate_json

profile_bp = Blueprint('profile', __name__)

class ProfileForm(JsonForm):
    name = StringField('Name', validators=[Optional(), Length(max=120)])
    email = StringField('Email', validators=[Optional(), Email()])

    def validate_email(self, email):
        if email.data and email.data != current_user.email:
            user = User.query.filter_by(email=email.data).first()
            if user:
                raise ValidationError('Email already registered.')

class PasswordChangeForm(JsonForm):
    current_password = PasswordField('Current Password', validators=[DataRequired()])
    new_password = PasswordField('New Password', validators=[
        DataRequired(),
        Length(min=6, message='Password must be at least 6 characters long')
    ])
    confirm_password = PasswordField('Confirm New Password', validators=[
        DataRequired(),
        EqualTo('new_password', message='Passwords must match')
    ])

@profile_bp.route('', methods=['GET'])
@login_required
def view_profile():
    created = Task.query.filter_by(creator_id=current_user.id).count()
    assigned = Task.query.filter_by(assignee_id=current_user.id).count()
    assigned_done = Task.query.filter_by(assignee_id=current_user.id, status='done').count()

    data = current_user.to_dict()
    data['stats'] = {
        'created_tasks': created,
        'assigned_tasks': assigned,
        'completed_tasks': assigned_done,
        'projects': ProjectMember.query.filter_by(user_id=current_user.id).count(),
        'completion_rate': round((assigned_done / assigned * 100) if assigned > 0 else 0, 1)
    }
    return jsonify(data)

@profile_bp.route('', methods=['PATCH'])
@login_required
def edit_profile():
    form, data = validate_json(ProfileForm)

    if 'name' in data:
        current_user.name = form.name.data or None
    if data.get('email'):
        current_user.email = form.email.data
    db.session.commit()
    return jsonify(current_user.to_dict())

@profile_bp.route('/password', methods=['POST'])
@login_required
def change_password():
    form, _ = validate_json(PasswordChangeForm)
    if not current_user.check_password(form.current_password.data):
        raise RequestValidationError('Current password is incorrect.')

    current_user.set_password(form.new_password.data)
    db.session.commit()
    return '', 204
