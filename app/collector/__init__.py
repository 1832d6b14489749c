"""
Collector Subsystem

Receiving side of the telemetry collection endpoint.
"""

from .factory import create_collector_module
from .services import CollectorService

__all__ = ['create_collector_module', 'CollectorService']
