"""Generator preferences persisted through the settings store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import structlog

from pagegen.common.models import LAST_TEMPLATE_OPTION
from pagegen.stores.base import BaseSettingsStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class GeneratorPreferences:
    """Values used to pre-fill the next generation request."""

    last_template_id: uuid.UUID | None = None


class PreferencesService:
    def __init__(self, store: BaseSettingsStore) -> None:
        self.store = store

    async def load(self) -> GeneratorPreferences:
        raw = await self.store.get_option(LAST_TEMPLATE_OPTION)
        if not raw:
            return GeneratorPreferences()
        try:
            return GeneratorPreferences(last_template_id=uuid.UUID(raw))
        except ValueError:
            logger.warning("preferences_invalid_template_id", value=raw)
            return GeneratorPreferences()

    async def save(self, preferences: GeneratorPreferences) -> None:
        if preferences.last_template_id is None:
            return
        await self.store.set_option(LAST_TEMPLATE_OPTION, str(preferences.last_template_id))
