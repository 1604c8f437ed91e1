from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./arena.db"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Match result policies
    ALLOW_TIED_RESULTS: bool = True # Equal scores complete the match with no winner
    ALLOW_RESCHEDULE_COMPLETED: bool = True
    WIN_POINTS: int = 3
    DEFAULT_NOTE_REASON: str = "No reason provided"
    UPCOMING_LIMIT: int = 10

    class Config:
        env_file = ".env"

settings = Settings()
