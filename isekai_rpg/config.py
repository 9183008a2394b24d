import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    DB_PATH: str = os.getenv("DB_PATH", "data/characters.db")
    REFERENCE_DATA_PATH: str = os.getenv("REFERENCE_DATA_PATH", "")
    DICE_MAX_COUNT: int = int(os.getenv("DICE_MAX_COUNT", "100"))
    DICE_SEED: str = os.getenv("DICE_SEED", "")
    HISTORY_MAX_ROLLERS: int = int(os.getenv("HISTORY_MAX_ROLLERS", "1000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
