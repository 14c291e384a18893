from contextlib import contextmanager
from typing import List, Optional

from attrs import define, field
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

dialects_with_schema = {"postgresql", "oracle", "mssql"}


@define
class DbConn:
    """Holds information about the connection to a database.

    Attributes:
        c_string: The connection string to the database.
        schema: The database schema selected on each new connection, for
            dialects that support it.
        engine: The engine used to connect to the database.
        s_stack: A stack of sessions.
    """

    c_string: str
    schema: str = "public"
    engine: Optional[Engine] = None
    s_stack: List[Session] = field(factory=list, repr=False)

    def connect(self) -> Engine:
        """Connect to the database."""
        if self.engine:
            return self.engine
        self.engine = create_engine(self.c_string)
        if self.engine.dialect.name in dialects_with_schema:
            self._set_search_path()
        return self.engine

    def _set_search_path(self):
        @event.listens_for(self.engine, "connect", insert=True)
        def set_search_path(dbapi_connection, connection_record):
            if not self.schema:
                return
            existing_autocommit = dbapi_connection.autocommit
            dbapi_connection.autocommit = True
            cursor = dbapi_connection.cursor()
            assert self.engine is not None, "Engine not set"
            if self.engine.dialect.name == "mssql":
                stm = f"USE {self.schema}"
            elif self.engine.dialect.name == "oracle":
                stm = f"ALTER SESSION SET CURRENT_SCHEMA = {self.schema}"
            else:
                stm = f"SET SESSION search_path='{self.schema}'"
            cursor.execute(stm)
            cursor.close()
            dbapi_connection.autocommit = existing_autocommit

    def close(self):
        """Close the connection to the database."""
        for s in self.s_stack:
            s.close()
        self.s_stack = []
        if self.engine:
            self.engine.dispose()
            self.engine = None

    @contextmanager
    def session(self, auto_commit=False):
        """Creates a new session which it then closes after use.

        If auto_commit is True, the session is committed after use. If the
        inner code raises an exception, the session is rolled back.
        """
        self.connect()
        session = sessionmaker(bind=self.engine, autoflush=True)()
        self.s_stack.append(session)
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        else:
            if session.is_active and auto_commit:
                session.commit()
        finally:
            session.close()
            self.s_stack.remove(session)

    def create_all_tables(self, Base):
        """Creates all tables defined in the Base metadata.

        Args:
            Base: The declarative base class containing the table metadata.
        """
        engine = self.connect()
        Base.metadata.create_all(bind=engine)
