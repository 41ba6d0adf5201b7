"""Tests for generator preferences."""

import uuid

from pagegen.common.models import LAST_TEMPLATE_OPTION
from pagegen.generation.preferences import GeneratorPreferences, PreferencesService


class TestPreferencesService:
    async def test_defaults_when_unset(self, memory_settings_store):
        prefs = await PreferencesService(memory_settings_store).load()
        assert prefs == GeneratorPreferences()
        assert prefs.last_template_id is None

    async def test_save_then_load(self, memory_settings_store):
        template_id = uuid.uuid4()
        service = PreferencesService(memory_settings_store)

        await service.save(GeneratorPreferences(last_template_id=template_id))

        assert memory_settings_store.options[LAST_TEMPLATE_OPTION] == str(template_id)
        assert (await service.load()).last_template_id == template_id

    async def test_invalid_stored_value_ignored(self, memory_settings_store):
        memory_settings_store.options[LAST_TEMPLATE_OPTION] = "not-a-uuid"
        prefs = await PreferencesService(memory_settings_store).load()
        assert prefs.last_template_id is None

    async def test_saving_empty_preferences_is_noop(self, memory_settings_store):
        await PreferencesService(memory_settings_store).save(GeneratorPreferences())
        assert memory_settings_store.options == {}
