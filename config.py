import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Barbershop Stock Control")
    VERSION: str = "1.0.0"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-only-change-me")
    ALGO: str = "HS256"
    TOKEN_EXPIRE_MIN: int = int(os.getenv("TOKEN_EXPIRE_MIN", 60))
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./stock_inventory.db")
    SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # used by the client-side store when no base url is given
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

settings = Settings()
