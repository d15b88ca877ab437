# app/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional, Tuple
from pydantic import Field
from pathlib import Path

DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "https://evaluacion.istla-sigala.edu.ec",
]


class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24)

    # Institute database (read only) and evaluation database (read/write)
    READ_DATABASE_URL: str = Field("sqlite+aiosqlite:///./instituto.db")
    WRITE_DATABASE_URL: str = Field("sqlite+aiosqlite:///./evaluaciones.db")
    SQL_ECHO: bool = Field(False)

    # Comma-separated origins. If empty or missing → DEFAULT_ORIGINS.
    ALLOWED_ORIGINS: Optional[str] = None

    RATE_LIMIT_DEFAULT: str = Field("10000/15minutes")
    RATE_LIMIT_AUTH: str = Field("100/15minutes")
    RATE_LIMIT_CRITICAL: str = Field("5000/5minutes")

    ENVIRONMENT: str = Field("development")
    LOG_LEVEL: str = Field("INFO")

    REPORT_TEMPLATE_PATH: str = Field(str(Path(__file__).resolve().parent / "templates" / "plantilla_reporte.docx"))
    # "Name|Title;Name|Title", for users without registered signatories
    REPORT_SIGNATORIES: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def allowed_origins(self) -> List[str]:
        if not self.ALLOWED_ORIGINS:
            return list(DEFAULT_ORIGINS)
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def signatories(self) -> List[Tuple[str, str]]:
        """
        Returns:
          - [] when nothing is configured (the PDF prints the vice-rectorate line)
          - [(name, TITLE), ...] otherwise; the PDF prints the first two
        """
        if not self.REPORT_SIGNATORIES:
            return []
        pairs = []
        for chunk in self.REPORT_SIGNATORIES.split(";"):
            if not chunk.strip():
                continue
            name, _, title = chunk.partition("|")
            pairs.append((name.strip(), title.strip().upper()))
        return pairs

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


settings = Settings()
