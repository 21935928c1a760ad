# Core module exports
from bindery.core.config import settings, get_settings, Settings
from bindery.core.registry import PriorityRegistry
from bindery.core.logging import (
    configure_logging,
    configure_from_settings,
    get_logger,
    bind_context,
    clear_context,
    unbind_context,
    meta_logger,
    hydration_logger,
    normalization_logger,
    validation_logger,
)
