"""Konfigurationsmanagement mit Pydantic Settings.

Lädt Konfiguration aus Environment-Variablen und .env-Datei.
Alle Felder haben Defaults – der Poller startet auch ohne .env,
überspringt dann aber mangels CRON_SECRET jeden Poll-Durchlauf.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_APP_BASE_URL = "http://localhost:3000"
DEFAULT_TELEMETRY_ENDPOINT = "https://telemetry.simstudio.ai/v1/traces"


class LogLevel(str, Enum):
    """Erlaubte Log-Level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class AppEnvironment(str, Enum):
    """Prozess-Umgebung. In PRODUCTION läuft der Poller automatisch."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class Runtime(str, Enum):
    """Laufzeitumgebung, für die der Bootstrap instrumentiert wird."""
    SERVER = "server"   # Vollwertiger Prozess: Telemetrie + Poller
    EDGE = "edge"       # Eingeschränkte Laufzeit: kein SDK, kein Poller
    CLIENT = "client"   # Browser-/Client-Seite: nichts zu tun


class Settings(BaseSettings):
    """Zentrale Konfiguration des Internal Pollers.

    Keine Pflichtfelder. CRON_SECRET ist für die Poll-Tasks nötig,
    sein Fehlen führt aber nur zum Überspringen, nicht zum Abbruch.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # ENV-Variablen haben Vorrang vor .env-Datei
        case_sensitive=False,
        extra="ignore",
    )

    # --- Ziel-App ---
    app_base_url: str = Field(
        default=DEFAULT_APP_BASE_URL,
        description="Basis-URL der App mit den Trigger-Endpoints",
    )
    cron_secret: Optional[str] = Field(
        default=None,
        description="Bearer-Token für die Trigger-Endpoints",
    )

    # --- Polling ---
    enable_polling: bool = Field(
        default=False,
        description="Poller auch außerhalb von production starten",
    )
    app_env: AppEnvironment = Field(
        default=AppEnvironment.DEVELOPMENT,
        description="Prozess-Umgebung: development, production, test",
    )
    app_runtime: Runtime = Field(
        default=Runtime.SERVER,
        description="Laufzeitumgebung: server, edge, client",
    )

    # --- Telemetrie ---
    telemetry_endpoint: str = Field(
        default=DEFAULT_TELEMETRY_ENDPOINT,
        description="OTLP/HTTP-Endpoint für Traces",
    )
    telemetry_disabled: bool = Field(
        default=False,
        description="Telemetrie komplett abschalten",
    )
    telemetry_server_side_enabled: bool = Field(
        default=True,
        description="Serverseitige Traces aktiv",
    )
    telemetry_sample_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sampling-Rate für Root-Spans",
    )
    service_name: str = Field(default="sim-studio")
    service_version: str = Field(default="0.1.0")

    # --- Logging ---
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log-Level für die Anwendung",
    )
    log_dir: Optional[Path] = Field(
        default=None,
        description="Verzeichnis für Log-Dateien (None = nur stdout)",
    )

    # --- Host-Prozess ---
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)

    @field_validator("app_base_url", "telemetry_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Trailing Slash entfernen, damit URL-Joins konsistent funktionieren."""
        return v.rstrip("/")

    @field_validator("cron_secret")
    @classmethod
    def empty_secret_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Leerer String zählt als nicht gesetzt."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def polling_enabled(self) -> bool:
        """True wenn der Poller beim Bootstrap gestartet werden soll."""
        return self.app_env == AppEnvironment.PRODUCTION or self.enable_polling


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Gibt die Settings-Instanz des Host-Prozesses zurück (Lazy Singleton).

    Die Poll-Tasks nutzen diese Instanz bewusst nicht, sondern lesen
    die Umgebung bei jedem Durchlauf neu ein.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
