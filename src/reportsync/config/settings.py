from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()


def _default_data_dir() -> str:
    base = os.getenv("LOCALAPPDATA") or os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return str(Path(base) / "StudentApp")


@dataclass(frozen=True)
class Settings:
    api_base_url: str = os.getenv("REPORTSYNC_API_BASE_URL", "https://training.elexbo.de")
    data_dir: str = os.getenv("REPORTSYNC_DATA_DIR") or _default_data_dir()

    request_timeout: float = float(os.getenv("REPORTSYNC_REQUEST_TIMEOUT", "15"))
    submit_retries: int = int(os.getenv("REPORTSYNC_SUBMIT_RETRIES", "3"))
    submit_backoff: float = float(os.getenv("REPORTSYNC_SUBMIT_BACKOFF", "1.0"))

    log_level: str = os.getenv("REPORTSYNC_LOG_LEVEL", "INFO")

    @property
    def reports_dir(self) -> Path:
        return Path(self.data_dir) / "WeekReports"

    @property
    def releases_dir(self) -> Path:
        return Path(self.data_dir) / "Releases"


settings = Settings()
