from flask import Blueprint, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional, ValidationError
from taskflow import db
from taskflow.errors import ValidationError as RequestValidationError
from taskflow.models import User, Project, ProjectMember, Board
from taskflow.utils.validation import JsonForm, validate_json

auth_bp = Blueprint('auth', __name__)

class LoginForm(JsonForm):
    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])
    remember_me = BooleanField('Remember Me')

class RegistrationForm(JsonForm):
    username = StringField('Username', validators=[
        DataRequired(),
        Length(min=3, max=80)
    ])
    email = StringField('Email', validators=[
        DataRequired(),
        Email()
    ])
    name = StringField('Name', validators=[Optional(), Length(max=120)])
    password = PasswordField('Password', validators=[
        DataRequired(),
        Length(min=6)
    ])
    password2 = PasswordField('Confirm Password', validators=[
        DataRequired(),
        EqualTo('password')
    ])

    def validate_username(self, username):
        user = User.query.filter_by(username=username.data).first()
        if user:
            raise ValidationError('Username already taken. Please choose a different one.')

    def validate_email(self, email):
        user = User.query.filter_by(email=email.data).first()
        if user:
            raise ValidationError('Email already registered. Please use a different one.')

@auth_bp.route('/register', methods=['POST'])
def register():
    form, _ = validate_json(RegistrationForm)

    user = User(
        username=form.username.data,
        email=form.email.data,
        name=form.name.data or None
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.flush()  # Flush to get user ID

    # Every new user starts with a personal project holding one board
    project = Project(
        name=f"{user.username}'s Project",
        description="Your personal project",
        owner_id=user.id
    )
    project.members.append(ProjectMember(user_id=user.id, role='owner'))
    board = Board(name='Main board', position=0)
    board.add_default_columns()
    project.boards.append(board)
    db.session.add(project)
    db.session.commit()

    current_app.logger.info('Registered user %s', user.username)
    return jsonify(user.to_dict()), 201

@auth_bp.route('/login', methods=['POST'])
def login():
    form, _ = validate_json(LoginForm)
    user = User.query.filter_by(username=form.username.data).first()
    if user is None or not user.check_password(form.password.data):
        current_app.logger.info('Failed login for %s', form.username.data)
        raise RequestValidationError('Invalid username or password.')

    login_user(user, remember=form.remember_me.data)
    return jsonify(user.to_dict())

@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return '', 204

@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Token for the X-CSRFToken header on state-changing requests"""
    return jsonify({'csrf_token': generate_csrf()})

@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())
