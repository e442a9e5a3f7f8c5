"""Load static configuration referenced from settings and build a hub."""

import importlib

import structlog

from skilldex.config import Settings, get_settings
from skilldex.exceptions import ConfigurationError
from skilldex.hub import KnowledgeHub

logger = structlog.get_logger()


def load_reference(reference: str):
    """
    Resolve a "package.module:attribute" reference.

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid reference {reference!r}; expected 'package.module:attribute'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import {module_name}: {e}") from e

    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise ConfigurationError(f"{module_name} has no attribute {attribute!r}") from e


def create_hub(settings: Settings | None = None) -> KnowledgeHub:
    """Build a hub from the configured skills and routes modules."""
    settings = settings or get_settings()

    skills = load_reference(settings.skills_module) if settings.skills_module else []
    routes = load_reference(settings.routes_module) if settings.routes_module else []
    if not settings.skills_module:
        logger.warning("no_skills_configured")

    hub = KnowledgeHub(skills=skills, routes=routes, settings=settings)
    logger.info(
        "hub_created",
        index_backend=settings.index_backend,
        skills=len(hub.skills),
        routes=len(hub.routes),
    )
    return hub
