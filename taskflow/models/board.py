from taskflow import db
from datetime import datetime

DEFAULT_COLUMNS = [
    ('To Do', '#8993a4'),
    ('In Progress', '#0052cc'),
    ('Review', '#8777d9'),
    ('Done', '#36b37e'),
]

class Board(db.Model):
    __tablename__ = 'boards'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    background_color = db.Column(db.String(7))
    position = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    columns = db.relationship('BoardColumn', backref='board', lazy='dynamic',
                              cascade='all, delete-orphan', order_by='BoardColumn.position')
    tasks = db.relationship('Task', backref='board', lazy='dynamic', cascade='all, delete-orphan')

    def add_default_columns(self):
        for position, (name, color) in enumerate(DEFAULT_COLUMNS):
            self.columns.append(BoardColumn(name=name, color=color, position=position))

    def to_dict(self, include_columns=True, include_tasks=False):
        data = {
            'id': self.id,
            'project_id': self.project_id,
            'name': self.name,
            'description': self.description,
            'background_color': self.background_color,
            'position': self.position,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'task_count': self.tasks.count()
        }
        if include_columns:
            data['columns'] = [column.to_dict() for column in self.columns]
        if include_tasks:
            from taskflow.models.task import Task
            data['tasks'] = [task.to_dict() for task in
                             self.tasks.order_by(Task.column_id, Task.position)]
        return data

    def __repr__(self):
        return f'<Board {self.name}>'


class BoardColumn(db.Model):
    __tablename__ = 'board_columns'

    id = db.Column(db.Integer, primary_key=True)
    board_id = db.Column(db.Integer, db.ForeignKey('boards.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), default='#8993a4', nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)

    tasks = db.relationship('Task', backref='column', lazy='dynamic', order_by='Task.position',
                            passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'board_id': self.board_id,
            'name': self.name,
            'color': self.color,
            'position': self.position,
            'task_count': self.tasks.count()
        }

    def __repr__(self):
        return f'<BoardColumn {self.name}>'
