"""Platform adapters and probes."""

from deploy_guide.adapters.base import PlatformAdapter, Probe
from deploy_guide.adapters.http_probe import HttpProbe
from deploy_guide.adapters.simulated import (
    SimulatedPlatformAdapter,
    SimulatedProbe,
    platform_domain,
)

__all__ = [
    "PlatformAdapter",
    "Probe",
    "HttpProbe",
    "SimulatedPlatformAdapter",
    "SimulatedProbe",
    "platform_domain",
]
