from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from config import settings

connect_args = {"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {}

db_engine = create_engine(
    settings.DB_URL,
    connect_args=connect_args,
    echo=False
)

LocalSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

Base = declarative_base()

def obtain_db_session():
    dbSession = LocalSession()
    try:
        yield dbSession
    finally:
        dbSession.close()
