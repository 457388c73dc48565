"""Application configuration. Loads from env vars."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings. Override via environment variables."""

    # Participant tracking. Fixed once the tracker is built (read in app lifespan).
    MAX_PARTICIPANTS: int = 7  # slot capacity; slot 0 is reserved, so 6 usable
    NUM_CHANNELS: int = 2  # ODAS tracked sources per frame
    ANGLE_SPREAD: int = 10  # degrees claimed either side of a new participant
    MAX_SILENCE: int = 500  # inactive channel-ticks before a meeting closes
    MIN_TURN_SILENCE: int = 30  # silent ticks before talking again counts as a new turn
    INITIAL_FREQUENCY_HZ: float = 200.0  # pitch estimate of a freshly detected participant

    # ODAS ingestion: SST JSON frames over UDP
    ODAS_LISTEN_ENABLED: bool = True
    ODAS_HOST: str = "127.0.0.1"
    ODAS_PORT: int = 9000
    INGEST_QUEUE_SIZE: int = 256  # raw frames waiting for the tracker; newest dropped when full

    # Live snapshot fan-out (WebSocket /ws/meeting)
    BROADCAST_QUEUE_SIZE: int = 8  # per subscriber; oldest dropped when full

    # Meeting summaries: one JSON file per closed meeting, MP_<unix seconds>.json
    SUMMARY_SAVE_ENABLED: bool = True
    SUMMARY_DIR: str = "./meetings"

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path empty = console only.
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # e.g. "logs/talkmap.log"

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
