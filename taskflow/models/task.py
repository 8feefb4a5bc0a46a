from taskflow import db
from datetime import datetime, timezone

PRIORITIES = ('low', 'medium', 'high', 'urgent')
STATUSES = ('todo', 'in_progress', 'review', 'done')

class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    board_id = db.Column(db.Integer, db.ForeignKey('boards.id'), nullable=False)
    column_id = db.Column(db.Integer, db.ForeignKey('board_columns.id'), nullable=False)
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    assignee_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    priority = db.Column(db.String(20), default='medium')  # low, medium, high, urgent
    status = db.Column(db.String(20), default='todo')  # todo, in_progress, review, done
    deadline = db.Column(db.DateTime)
    position = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = db.Column(db.DateTime)

    creator = db.relationship('User', foreign_keys=[creator_id], backref='created_tasks')
    assignee = db.relationship('User', foreign_keys=[assignee_id], backref='assigned_tasks')

    def is_overdue(self, now=None):
        if self.deadline and self.status != 'done':
            now = now or datetime.utcnow()
            if self.deadline.tzinfo is not None and now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            return now > self.deadline
        return False

    def set_status(self, status):
        old_status = self.status
        self.status = status
        if old_status != 'done' and status == 'done':
            self.completed_at = datetime.utcnow()
        elif old_status == 'done' and status != 'done':
            self.completed_at = None

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'board_id': self.board_id,
            'column_id': self.column_id,
            'position': self.position,
            'priority': self.priority,
            'status': self.status,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'is_overdue': self.is_overdue(),
            'creator': self.creator.to_summary() if self.creator else None,
            'assignee': self.assignee.to_summary() if self.assignee else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }

    def __repr__(self):
        return f'<Task {self.title}>'
