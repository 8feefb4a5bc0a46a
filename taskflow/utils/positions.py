from sqlalchemy import func
from taskflow import db
from taskflow.errors import ValidationError


def validate_position(position):
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise ValidationError('Position must be a non-negative integer')


def next_position(model, container_field, container_id):
    """Append position for a new row: current max + 1, or 0"""
    current = db.session.query(func.max(model.position)).filter(
        getattr(model, container_field) == container_id
    ).scalar()
    return 0 if current is None else current + 1


def ordered_siblings(model, container_field, container_id, exclude_id=None):
    query = model.query.filter(getattr(model, container_field) == container_id)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.order_by(model.position.asc(), model.id.asc()).all()


def renumber(items):
    for index, item in enumerate(items):
        item.position = index
    return items


def move_to_position(item, container_field, container_id, position):
    """
    Move a row into a container at a position and renumber both containers

    The position is clamped to the number of rows already in the target
    container, so positions stay 0..N-1 after every move. Last write wins:
    no version check is made. Does not commit.
    """
    validate_position(position)
    model = type(item)
    source_id = getattr(item, container_field)

    targets = ordered_siblings(model, container_field, container_id, exclude_id=item.id)
    position = min(position, len(targets))
    setattr(item, container_field, container_id)
    targets.insert(position, item)
    renumber(targets)

    if source_id != container_id:
        renumber(ordered_siblings(model, container_field, source_id, exclude_id=item.id))
    return position


def close_gap(model, container_field, container_id, removed_id):
    """Renumber what is left of a container after a row is removed"""
    return renumber(ordered_siblings(model, container_field, container_id, exclude_id=removed_id))


def apply_order(model, container_field, container_id, ordered_ids):
    """
    Write every row's position of a container in one go

    ``ordered_ids`` must name each row of the container exactly once.
    Does not commit; the caller commits once so the whole order lands
    atomically.
    """
    if not isinstance(ordered_ids, list) or \
            any(isinstance(i, bool) or not isinstance(i, int) for i in ordered_ids):
        raise ValidationError('Order must be a list of ids')

    items = {item.id: item for item in ordered_siblings(model, container_field, container_id)}
    if len(ordered_ids) != len(items) or set(ordered_ids) != set(items):
        raise ValidationError('Order must list every item of the container exactly once')

    ordered = [items[item_id] for item_id in ordered_ids]
    return renumber(ordered)
