from contextlib import contextmanager

from sqlmodel import Session, SQLModel, create_engine

from doctorcare_common.config import PostgresConfig


def get_engine(config: PostgresConfig):
    return create_engine(
        config.url,
        pool_pre_ping=True,
        connect_args={"connect_timeout": config.connect_timeout_seconds},
    )


def init_db(engine):
    SQLModel.metadata.create_all(engine)


def make_session_factory(engine):
    """Returns a callable producing SQLModel Session context managers."""

    @contextmanager
    def session_factory():
        with Session(engine) as session:
            yield session

    return session_factory
