from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings with environment variable integration.

    Attributes
    ----------
    debug: bool, default=False
        Enable/disable debug mode.
    logging_level: str, default="INFO"
        Logging verbosity: e.g., "INFO", "DEBUG".
    base_dir: Path, default=auto-detected
        Project base directory.
    environment: str, default="development"
        Application environment: "development", "production", etc.
    host: str, default="127.0.0.1"
        Interface the Uvicorn server binds to.
    port: int, default=3000
        Port the Uvicorn server listens on.
    logs_dir: Path, derived from base_dir
        Directory for log files.
    log_file: Path, derived from base_dir
        Main log file path.
    firebase_credentials_path: Path | None, optional
        Path to the Firebase service account JSON file.
        Application default credentials are used when unset.
    firebase_project_id: str | None, optional
        Firebase project the device tokens belong to.
    firebase_dry_run: bool, default=False
        Validate messages with the gateway without delivering them.
    gateway_timeout_seconds: float, default=10.0
        Upper bound on a single gateway send call.
    silent_sound: str, default="offer_notification.caf"
        Custom sound asset played by silent order updates.
    click_action: str, default="FLUTTER_NOTIFICATION_CLICK"
        Click action tag the mobile client routes notifications with.
    ssl_certfile_path: Path | None, optional
        Path to SSL certificate for Uvicorn.
    ssl_keyfile_path: Path | None, optional
        Path to SSL key for Uvicorn.

    Notes
    -----
    Paths are resolved relative to the project root.
    Service account credentials should always be provided through a mounted
    file or secret management system, never committed to version control.
    """

    debug: bool = False
    logging_level: str = "INFO"
    base_dir: Path = Path(__file__).resolve().parent.parent
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 3000
    logs_dir: Path = base_dir / "logs"
    log_file: Path = logs_dir / "dispatch.log"
    firebase_credentials_path: Path | None = None
    firebase_project_id: str | None = None
    firebase_dry_run: bool = False
    gateway_timeout_seconds: float = 10.0
    silent_sound: str = "offer_notification.caf"
    click_action: str = "FLUTTER_NOTIFICATION_CLICK"
    ssl_certfile_path: Path | None = None
    ssl_keyfile_path: Path | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    def prepare_log_files(self) -> None:
        """Ensure the log directory and main log file exist."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file.touch(exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Create and cache singleton Settings instance for application use.

    Returns
    -------
    Settings
        Cached singleton instance of application settings with all
        configuration values loaded and validated.
    """
    return Settings()
