from taskflow import db
from .user import User
from .project import Project, ProjectMember
from .board import Board, BoardColumn
from .task import Task
from .audit import TaskAudit

__all__ = ['db', 'User', 'Project', 'ProjectMember', 'Board', 'BoardColumn', 'Task', 'TaskAudit']
