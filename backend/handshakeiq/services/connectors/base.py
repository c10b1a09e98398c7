from abc import ABC, abstractmethod


class BaseConnector(ABC):
    """An outbound integration with a single external API."""

    name: str

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the credentials this connector needs are present."""
