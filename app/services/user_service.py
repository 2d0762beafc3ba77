from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.profile import Profile
from app.models.user import User
from app.schemas.user import UserOut, UserUpdate
from app.services.auth_service import Identity


def to_user_out(user: User) -> UserOut:
    return UserOut(id=user.id, email=user.email, name=user.name, is_active=user.is_active, role=user.role)


def update_user(session: Session, user: User, payload: UserUpdate) -> User:
    data = payload.model_dump(exclude_unset=True)
    email = data.get('email')
    if email is not None and email != user.email:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing and existing.id != user.id:
            raise ValueError('Email already registered')
        user.email = email
    if data.get('name') is not None:
        user.name = data['name']

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def upsert_profile(session: Session, identity: Identity) -> Profile:
    record = session.get(Profile, identity.id)
    if record is None:
        record = Profile(id=identity.id)
    record.email = identity.email
    record.display_name = identity.display_name or identity.email
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def sync_profile(session: Session, identity: Identity) -> bool:
    """Signed-in hook: make sure the identity has a profile row. Never raises."""
    try:
        upsert_profile(session, identity)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning('auth.profile_sync_failed', user_id=identity.id, error=str(exc))
        return False
    return True
