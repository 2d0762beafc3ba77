from sqlalchemy import event
from sqlmodel import Session, create_engine
from app.core.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith('sqlite'):
        return {'check_same_thread': False}
    return {}


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)
if engine.dialect.name == 'sqlite':
    event.listen(engine, 'connect', _enable_sqlite_foreign_keys)


def get_session():
    with Session(engine) as session:
        yield session
