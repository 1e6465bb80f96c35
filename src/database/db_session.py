from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from src.config import DATABASE_URL

Base = declarative_base()


class Database:
    """ This Class contains all the methods related to the Database utitlities.

    One instance is built per process. It is the only holder of write access
    to the ballot tables; request handlers borrow sessions from it and pass
    them into the ballot components.
    """

    def __init__(self, url: str = DATABASE_URL, **engine_kwargs):
        try:
            self.engine = create_engine(url, echo=False, **engine_kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Error while creating the database engine: {e}")
            raise

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        """Create every table registered on ``Base``."""
        # model modules register themselves on import
        import src.routers.ballots.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def get_session(self):
        """ This function returns a new session; the caller closes it."""
        return self.SessionLocal()


database = Database()


def get_db():
    """FastAPI dependency yielding a session bound to the process database."""
    db = database.get_session()
    try:
        yield db
    finally:
        db.close()
