from sqlalchemy.orm import Session

from db import models
from schemas import user_schema


def check_user_exist(db: Session, user_email: str):
    return db.query(models.User).filter(models.User.email == user_email).first()


def get_user_by_username(db: Session, username: str):
    return db.query(models.User).filter(models.User.username == username).first()


def get_user_by_username_or_email(db: Session, username_or_email: str):
    user = get_user_by_username(db, username_or_email)
    if not user:
        user = check_user_exist(db, username_or_email)
    return user


def create_user(db: Session, user_data: user_schema.UserCreate, hashed_password: str) -> models.User:
    if user_data.team_id is not None and not db.get(models.Team, user_data.team_id):
        raise ValueError("Time não encontrado")

    new_user = models.User(
        username=user_data.username,
        email=user_data.email,
        full_name=user_data.full_name,
        hashed_password=hashed_password,
        team_id=user_data.team_id,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


def update_team(db: Session, user_id: int, team_id: int) -> models.User:
    db_user = db.query(models.User).filter(models.User.id == user_id).first()
    if not db_user:
        raise ValueError("Usuário não encontrado")
    if not db.get(models.Team, team_id):
        raise ValueError("Time não encontrado")

    db_user.team_id = team_id
    db.commit()
    db.refresh(db_user)
    return db_user
