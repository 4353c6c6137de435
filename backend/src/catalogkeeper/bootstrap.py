"""Wiring of the lifecycle and its collaborators.

Every registry is created here and passed down explicitly; nothing is
registered at import time.
"""

import logging

from catalogkeeper.actions import ActionDispatcher, register_builtin_actions
from catalogkeeper.config import MIN_PRICE_SETTING, Settings
from catalogkeeper.hooks import HookRegistry, HookService
from catalogkeeper.integrity import IntegrityChecker, register_integrity_hooks
from catalogkeeper.lifecycle import EntityLifecycle
from catalogkeeper.metadata.loader import MetadataLoader
from catalogkeeper.persistence import AdapterQueryService, PersistenceAdapter, create_adapter
from catalogkeeper.validation import ValidationService, ValidatorRegistry
from catalogkeeper.validation.validators import register_canned_validators

logger = logging.getLogger(__name__)


def build_lifecycle(
    adapter: PersistenceAdapter,
    metadata_loader: MetadataLoader | None = None,
) -> EntityLifecycle:
    """Assemble an EntityLifecycle around a connected adapter."""
    if metadata_loader is None:
        metadata_loader = MetadataLoader().load_all()

    query_service = AdapterQueryService(adapter, metadata_loader)

    validator_registry = ValidatorRegistry()
    register_canned_validators(validator_registry)
    validation_service = ValidationService(
        query_service, validator_registry, metadata_loader
    )

    hook_registry = HookRegistry()
    register_integrity_hooks(hook_registry, IntegrityChecker(query_service))

    dispatcher = ActionDispatcher()
    register_builtin_actions(dispatcher)

    return EntityLifecycle(
        adapter=adapter,
        metadata_loader=metadata_loader,
        validation_service=validation_service,
        hook_service=HookService(hook_registry),
        action_dispatcher=dispatcher,
    )


def open_catalog(settings: Settings | None = None) -> EntityLifecycle:
    """Connect to storage, create tables and seed settings.

    The minimal price is only written when the setting is absent, so a
    value changed at runtime survives restarts.
    """
    settings = settings or Settings.from_env()
    metadata_loader = MetadataLoader().load_all()

    adapter = create_adapter(settings.database)
    adapter.connect()
    for name in metadata_loader.list_entities():
        adapter.initialize_entity(metadata_loader.require_entity(name))

    if adapter.get_setting(MIN_PRICE_SETTING) is None:
        adapter.set_setting(MIN_PRICE_SETTING, settings.minimal_price)
        logger.info("Seeded %s = %s", MIN_PRICE_SETTING, settings.minimal_price)

    return build_lifecycle(adapter, metadata_loader)
