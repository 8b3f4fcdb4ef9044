# app/data/database.py
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    pass


def make_engine(url: str, **kwargs) -> Engine:
    return create_engine(url, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def get_db(request: Request) -> Iterator[Session]:
    # fabryka sesji tworzona w create_app, nie globalnie
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
