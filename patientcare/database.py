from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from patientcare.core import config


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith('sqlite'):
        connect_args['check_same_thread'] = False
    return create_engine(database_url, connect_args=connect_args)


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_record_schema_checked = False


def ensure_record_schema() -> None:
    global _record_schema_checked

    if _record_schema_checked:
        return

    with _schema_lock:
        if _record_schema_checked:
            return

        inspector = inspect(engine)

        if 'record_documents' not in inspector.get_table_names():
            _record_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('record_documents')}
        migration_steps = [
            ('version', 'ALTER TABLE record_documents ADD COLUMN version INTEGER NOT NULL DEFAULT 0'),
            ('updated_at', 'ALTER TABLE record_documents ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))

        _record_schema_checked = True
