"""
APSF Service Layer: ApsfService ABC and ServiceRegistry.

Each geometry family (annular, later sectorial and grid) is an ApsfService
registered with the ServiceRegistry. The registry provides lightweight
dependency injection: services are looked up by ID at runtime, and each
service owns its own API endpoints, config validation, and result format.

Classes:
    ApsfService     - Abstract base class for all fit/predict services
    ServiceRegistry - Central lookup container for registered services

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from abc import ABC, abstractmethod


class ApsfService(ABC):
    """
    Abstract base class for an APSF fit/predict service.

    Class Attributes
    ----------------
    id : str
        Unique service identifier (e.g. "annular").
    name : str
        Human-readable display name.
    description : str
        One-line summary.
    geometry : str
        Geometry family tag of the models the service produces.
    status : str
        "live" or "coming_soon".
    """

    id = ""
    name = ""
    description = ""
    geometry = ""
    status = "coming_soon"

    @abstractmethod
    def validate(self, config):
        """
        Validate a raw fit request and return normalized config.

        Raises
        ------
        ValueError
            If the config is invalid.
        """

    @abstractmethod
    def compute(self, config):
        """Run the fit and return a JSON-serializable result dict."""

    def register_routes(self, blueprint):
        """
        Mount service-specific API endpoints onto a Flask blueprint.

        Live services override this; coming-soon stubs inherit this no-op.
        """
        pass

    def metadata(self):
        """Return service metadata for the registry listing."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "geometry": self.geometry,
            "status": self.status,
        }


class ServiceRegistry:
    """Central lookup container for registered ApsfService instances."""

    def __init__(self):
        self._services = {}

    def register(self, service):
        """
        Register a service instance.

        Raises
        ------
        ValueError
            If a service with the same id is already registered.
        """
        if service.id in self._services:
            raise ValueError(
                "Service '{}' is already registered".format(service.id)
            )
        self._services[service.id] = service

    def get(self, service_id):
        """Look up a service by id; None if not found."""
        return self._services.get(service_id)

    def list_all(self):
        """Metadata for all registered services, in registration order."""
        return [s.metadata() for s in self._services.values()]

    def live(self):
        """All services with status 'live'."""
        return [s for s in self._services.values()
                if s.status == "live"]
