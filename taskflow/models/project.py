from taskflow import db
from datetime import datetime

MANAGER_ROLES = ('owner', 'admin')


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    members = db.relationship('ProjectMember', backref='project', lazy='dynamic',
                              cascade='all, delete-orphan')
    boards = db.relationship('Board', backref='project', lazy='dynamic',
                             cascade='all, delete-orphan', order_by='Board.position')

    def get_member(self, user):
        return self.members.filter_by(user_id=user.id).first()

    def has_access(self, user):
        if self.owner_id == user.id:
            return True
        return self.get_member(user) is not None

    def can_manage(self, user):
        """Owners and admins manage boards, columns and membership"""
        if self.owner_id == user.id:
            return True
        member = self.get_member(user)
        return member is not None and member.role in MANAGER_ROLES

    def to_dict(self, include_members=True):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'owner_id': self.owner_id,
            'owner': self.owner.to_summary(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'board_count': self.boards.count()
        }
        if include_members:
            data['members'] = [member.to_dict() for member in self.members]
        return data

    def __repr__(self):
        return f'<Project {self.name}>'


class ProjectMember(db.Model):
    __tablename__ = 'project_members'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    role = db.Column(db.String(20), default='member', nullable=False)  # owner, admin, member
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('project_id', 'user_id'),)

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'user': self.user.to_summary(),
            'role': self.role,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None
        }

    def __repr__(self):
        return f'<ProjectMember {self.user_id} -> {self.project_id} ({self.role})>'
