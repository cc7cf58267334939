from sqlalchemy.orm import Session
from sqlalchemy import select
from models.models_user import User

def get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()

def get_user_by_student_id(db: Session, student_id: str) -> User | None:
    return db.execute(select(User).where(User.student_id == student_id)).scalar_one_or_none()

def create_user(db: Session, *, student_id: str, username: str, password_hash: str) -> User:
    user = User(student_id=student_id, username=username, password_hash=password_hash)
    db.add(user)
    db.flush()
    return user
