"""Authentication for Azure DevOps requests using a Personal Access Token."""

import base64

from ..config import ClientConfig


class AuthenticationError(Exception):
    """Raised when no valid credentials are configured."""

    pass


class AuthManager:
    """Builds authorization headers for Azure DevOps API requests.

    The PAT is sent as the password of a Basic credential with an empty
    username.
    """

    def __init__(self, config: ClientConfig):
        """Initialize AuthManager.

        Args:
            config: Client configuration holding the PAT.
        """
        self.config = config

    def get_headers(self) -> dict[str, str]:
        """Get authorization headers for API requests.

        Returns:
            Dictionary containing Authorization header.

        Raises:
            AuthenticationError: If no PAT is configured.
        """
        if not self.config.pat:
            raise AuthenticationError(
                "No valid credentials configured. Set AZURE_DEVOPS_PAT or the PAT setting."
            )
        encoded = base64.b64encode(f":{self.config.pat}".encode()).decode()
        return {"Authorization": f"Basic {encoded}"}

    def has_valid_credentials(self) -> bool:
        """Check if valid credentials are available."""
        return bool(self.config.pat)
