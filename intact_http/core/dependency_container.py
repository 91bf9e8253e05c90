# Dependency Injection Container.

import httpx

from intact_http.settings import Settings


class DependencyContainer:
    """Holds shared dependencies for response stages.

    Stages receive the container on every `apply` call, which keeps external
    dependencies in one place and makes them easy to replace in tests.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        """
        Initializes the container.

        Args:
            settings: Application settings.
            http_client: The configured asynchronous HTTP client.
        """
        self.settings = settings
        self.http_client = http_client
