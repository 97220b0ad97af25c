"""
Session management for the step store.

Each SqlStepStore owns its own sessionmaker bound to its engine, so tests
can run several stores side by side.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """
    Transactional scope: commit on success, roll back on error.

    Usage:
        with session_scope(factory) as session:
            save_step_result(session, ...)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
