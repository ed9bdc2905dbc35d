import logging.config
import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
load_dotenv(os.path.join(BASE_DIR, '.env'))


class Settings(BaseSettings):
    PROJECT_NAME: str = os.getenv('PROJECT_NAME', 'FormCoach')
    LOGGING_CONFIG_FILE: str = os.path.join(BASE_DIR, 'logging.ini')
    SESSION_LOG_DIR: str = os.getenv('SESSION_LOG_DIR', os.path.join(BASE_DIR, 'data', 'logs'))

    # Exercise session timing (seconds)
    START_COUNTDOWN_SECONDS: float = float(os.getenv('START_COUNTDOWN_SECONDS', '5'))
    REST_SECONDS: float = float(os.getenv('REST_SECONDS', '5'))
    COACH_INTERVAL_SECONDS: float = float(os.getenv('COACH_INTERVAL_SECONDS', '3'))
    SCORE_DISPLAY_INTERVAL_SECONDS: float = float(os.getenv('SCORE_DISPLAY_INTERVAL_SECONDS', '0.5'))

    # Coaching
    COACHING_SCORE_THRESHOLD: int = int(os.getenv('COACHING_SCORE_THRESHOLD', '85'))
    SPEECH_DEBOUNCE_SECONDS: float = float(os.getenv('SPEECH_DEBOUNCE_SECONDS', '2'))
    GOOD_FORM_SPEECH_DELAY_SECONDS: float = float(os.getenv('GOOD_FORM_SPEECH_DELAY_SECONDS', '5'))

    # Reference keyframes
    KEYFRAME_SAMPLE_INTERVAL: float = float(os.getenv('KEYFRAME_SAMPLE_INTERVAL', '0.1'))
    MINOR_THRESHOLD: float = float(os.getenv('MINOR_THRESHOLD', '15'))
    MAJOR_THRESHOLD: float = float(os.getenv('MAJOR_THRESHOLD', '30'))


settings = Settings()


def configure_logging(config_file: str = None) -> None:
    """Apply the logging.ini configuration, keeping existing loggers."""
    config_file = config_file or settings.LOGGING_CONFIG_FILE
    if not os.path.exists(config_file):
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).warning(f"[CONFIG] Logging config not found: {config_file}")
        return
    logging.config.fileConfig(config_file, disable_existing_loggers=False)
