"""Discovery utility for Temporal workflows and activities."""

import importlib
import pkgutil

from gazette_ingest.utils.logging import get_logger

logger = get_logger(__name__)

COMPONENT_PACKAGES = (
    "gazette_ingest.temporal.activities",
    "gazette_ingest.temporal.workflows",
)


def discover_all():
    """Import every activity and workflow module so their registry decorators run."""
    for package_name in COMPONENT_PACKAGES:
        package = importlib.import_module(package_name)
        for _, mod_name, _ in pkgutil.walk_packages(package.__path__, f"{package_name}."):
            importlib.import_module(mod_name)
            logger.debug(f"Imported Temporal component module: {mod_name}")
    logger.info("All Temporal workflows and activities discovered and registered successfully")
