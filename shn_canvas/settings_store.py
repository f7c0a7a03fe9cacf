"""Local configuration blob for provider and store credentials.

The blob lives in a single JSON file under one fixed key:

    {"shn-canvas-config": {"llm": {...}, "firebase": {...}}}

Values stored here take precedence over environment settings.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from shn_canvas.config import DEFAULT_GEMINI_MODEL, Settings
from shn_canvas.errors import ConfigurationMissingError

logger = logging.getLogger(__name__)

CONFIG_KEY = "shn-canvas-config"


class LLMConfig(BaseModel):
    """Generative language provider credentials."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field("", alias="apiKey")
    model: str = DEFAULT_GEMINI_MODEL


class StoreConfig(BaseModel):
    """Firestore REST credentials."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field("", alias="apiKey")
    project_id: str = Field("", alias="projectId")
    auth_domain: str = Field("", alias="authDomain")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.project_id)


class CanvasConfig(BaseModel):
    """Flat bag of credentials; one instance per client."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    firebase: StoreConfig = Field(default_factory=StoreConfig)

    def require_llm_key(self) -> str:
        """Return the LLM API key or raise if it is not set."""
        if not self.llm.api_key:
            raise ConfigurationMissingError("llm.apiKey")
        return self.llm.api_key

    def to_blob(self) -> dict[str, dict[str, str]]:
        """Serialize with the camelCase keys used on disk."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CanvasConfig":
        return cls(
            llm=LLMConfig(api_key=settings.gemini_api_key, model=settings.gemini_model),
            firebase=StoreConfig(
                api_key=settings.firebase_api_key,
                project_id=settings.firebase_project_id,
                auth_domain=settings.firebase_auth_domain,
            ),
        )


class LocalConfigStore:
    """Reads and writes the config blob on the local filesystem."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read_blob(self) -> dict:
        """Return the raw blob, or an empty dict when nothing is stored."""
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable config file at {self._path}")
            return {}
        blob = data.get(CONFIG_KEY, {}) if isinstance(data, dict) else {}
        return blob if isinstance(blob, dict) else {}

    def load(self, settings: Settings | None = None) -> CanvasConfig:
        """Load config, layering stored values over environment settings.

        Args:
            settings: Environment settings used for any field the blob leaves empty

        Returns:
            Effective CanvasConfig
        """
        base = CanvasConfig.from_settings(settings) if settings else CanvasConfig()
        blob = self.read_blob()

        llm = base.llm.model_dump()
        stored_llm = LLMConfig.model_validate(blob.get("llm") or {})
        llm.update({k: v for k, v in stored_llm.model_dump(exclude_unset=True).items() if v})

        store = base.firebase.model_dump()
        stored_store = StoreConfig.model_validate(blob.get("firebase") or {})
        store.update({k: v for k, v in stored_store.model_dump(exclude_unset=True).items() if v})

        return CanvasConfig(llm=LLMConfig(**llm), firebase=StoreConfig(**store))

    def save(self, config: CanvasConfig) -> None:
        """Persist config under the fixed key, keeping any other top-level keys.

        An empty API key keeps the stored one.
        """
        existing: dict = {}
        if self._path.exists():
            try:
                loaded = json.loads(self._path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    existing = loaded
            except json.JSONDecodeError:
                logger.warning(f"Overwriting unreadable config file at {self._path}")

        previous = existing.get(CONFIG_KEY)
        previous = previous if isinstance(previous, dict) else {}
        blob = config.to_blob()
        for section in ("llm", "firebase"):
            stored = previous.get(section) or {}
            if not blob[section]["apiKey"] and isinstance(stored, dict) and stored.get("apiKey"):
                blob[section]["apiKey"] = stored["apiKey"]

        existing[CONFIG_KEY] = blob
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(existing, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Saved canvas config to {self._path}")
