from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from tetelek.core import config


engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_user_schema_checked = False
_tetel_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _upgrade_user_table(target: Engine) -> None:
    inspector = inspect(target)

    if 'user' not in inspector.get_table_names():
        return

    existing_columns = {column['name'] for column in inspector.get_columns('user')}
    migration_steps = [
        ('email', 'ALTER TABLE "user" ADD COLUMN email VARCHAR(255)'),
        ('superuser', 'ALTER TABLE "user" ADD COLUMN superuser BOOLEAN NOT NULL DEFAULT FALSE'),
    ]

    with target.begin() as connection:
        for column_name, statement in migration_steps:
            if column_name not in existing_columns:
                connection.execute(text(statement))
        connection.execute(
            text('CREATE UNIQUE INDEX IF NOT EXISTS ux_user_username ON "user"(username)')
        )
        connection.execute(
            text('CREATE UNIQUE INDEX IF NOT EXISTS ux_user_email ON "user"(email)')
        )


def _upgrade_tetel_tables(target: Engine) -> None:
    inspector = inspect(target)
    table_names = set(inspector.get_table_names())
    positioned_tables = [
        ('section', 'idx_section_tetel_position', 'tetel_id'),
        ('subsection', 'idx_subsection_section_position', 'section_id'),
    ]

    with target.begin() as connection:
        for table_name, index_name, parent_column in positioned_tables:
            if table_name not in table_names:
                continue
            existing_columns = {column['name'] for column in inspector.get_columns(table_name)}
            if 'position' not in existing_columns:
                connection.execute(
                    text(f'ALTER TABLE {table_name} ADD COLUMN position INTEGER NOT NULL DEFAULT 0')
                )
            connection.execute(
                text(f'CREATE INDEX IF NOT EXISTS {index_name} ON {table_name}({parent_column}, position)')
            )


def ensure_user_schema(bind: Engine | None = None) -> None:
    """Bring an older ``user`` table up to date with the current model.

    Early deployments only had ``username`` and ``password``; the e-mail and
    superuser columns plus the uniqueness indexes were added later.
    """
    global _user_schema_checked

    if bind is not None:
        _upgrade_user_table(bind)
        return

    if _user_schema_checked:
        return

    with _schema_lock:
        if _user_schema_checked:
            return
        _upgrade_user_table(engine)
        _user_schema_checked = True


def ensure_tetel_schema(bind: Engine | None = None) -> None:
    global _tetel_schema_checked

    if bind is not None:
        _upgrade_tetel_tables(bind)
        return

    if _tetel_schema_checked:
        return

    with _schema_lock:
        if _tetel_schema_checked:
            return
        _upgrade_tetel_tables(engine)
        _tetel_schema_checked = True
