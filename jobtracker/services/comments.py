"""Comments on tasks."""

from sqlalchemy.orm import Session, selectinload

from jobtracker.core.errors import NotFoundError
from jobtracker.models import Comment, Task, User


def list_comments(db: Session, task_id: int) -> list[Comment]:
    if db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")
    return (
        db.query(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at, Comment.id)
        .all()
    )


def add_comment(db: Session, task_id: int, author: User, body: str) -> Comment:
    if db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")
    comment = Comment(task_id=task_id, author_id=author.id, body=body.strip())
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
