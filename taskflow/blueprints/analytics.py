from collections import Counter
from datetime import datetime, timedelta
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from taskflow.models import Task, Board
from taskflow.models.task import PRIORITIES, STATUSES
from taskflow.utils.access import accessible_project_ids, get_project_or_404

analytics_bp = Blueprint('analytics', __name__)

def summarize(tasks, now=None):
    """Aggregate counts over a list of tasks"""
    now = now or datetime.utcnow()
    week_ago = now - timedelta(days=7)

    by_status = Counter(task.status for task in tasks)
    by_priority = Counter(task.priority for task in tasks)
    by_project = Counter(task.board.project.name for task in tasks)

    overdue = [task for task in tasks if task.is_overdue(now)]
    created_this_week = [task for task in tasks
                         if task.created_at and task.created_at >= week_ago]
    completed_this_week = [task for task in tasks
                           if task.status == 'done' and
                           (task.completed_at or task.updated_at or now) >= week_ago]

    total = len(tasks)
    done = by_status.get('done', 0)
    return {
        'total': total,
        'by_status': {status: by_status.get(status, 0) for status in STATUSES},
        'by_priority': {priority: by_priority.get(priority, 0) for priority in PRIORITIES},
        'by_project': dict(by_project),
        'overdue': len(overdue),
        'overdue_tasks': [task.to_dict() for task in
                          sorted(overdue, key=lambda task: task.deadline)[:10]],
        'created_this_week': len(created_this_week),
        'completed_this_week': len(completed_this_week),
        'completion_rate': round((done / total * 100) if total > 0 else 0, 1)
    }

@analytics_bp.route('', methods=['GET'])
@login_required
def overview():
    """Statistics across every project the user can see"""
    project_id = request.args.get('project_id', type=int)
    if project_id:
        project_ids = [get_project_or_404(project_id).id]
    else:
        project_ids = accessible_project_ids(current_user)

    if not project_ids:
        return jsonify(summarize([]))

    tasks = Task.query.join(Board, Task.board_id == Board.id) \
        .filter(Board.project_id.in_(project_ids)).all()
    return jsonify(summarize(tasks))
