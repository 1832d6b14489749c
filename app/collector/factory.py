"""
Factory for creating the collector module.
"""
from pathlib import Path
from .routes import create_collector_blueprint
from .services import CollectorService


def create_collector_module(data_dir: Path) -> dict:
    """Create collector module with service and routes.

    Args:
        data_dir: Directory to store collected session files

    Returns:
        Dictionary containing the service and blueprint
    """
    collector_service = CollectorService(data_dir)

    blueprint = create_collector_blueprint(collector_service)

    return {
        "service": collector_service,
        "blueprint": blueprint
    }
