import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect, CSRFError
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()

def create_app(config_class=Config):
    # Configure Flask for serverless environment
    app = Flask(__name__, instance_relative_config=False, instance_path='/tmp')
    app.config.from_object(config_class)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    logging.getLogger('taskflow').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    from taskflow.errors import TaskflowError

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    from taskflow.blueprints.auth import auth_bp
    from taskflow.blueprints.profile import profile_bp
    from taskflow.blueprints.projects import projects_bp
    from taskflow.blueprints.boards import boards_bp
    from taskflow.blueprints.columns import columns_bp
    from taskflow.blueprints.tasks import tasks_bp
    from taskflow.blueprints.analytics import analytics_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(boards_bp, url_prefix='/api/boards')
    app.register_blueprint(columns_bp, url_prefix='/api/columns')
    app.register_blueprint(tasks_bp, url_prefix='/api/tasks')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')

    # Error handlers
    @app.errorhandler(TaskflowError)
    def taskflow_error(error):
        if error.status_code >= 500:
            db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        return jsonify({'error': error.description}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return jsonify({'error': 'Internal server error'}), 500

    # Import models to ensure they are registered with SQLAlchemy
    from taskflow.models import User, Project, ProjectMember, Board, BoardColumn, Task, TaskAudit

    with app.app_context():
        db.create_all()

    return app
