from abc import ABC, abstractmethod

from ..domain.entities import NotificationPayload


class PushGateway(ABC):
    """Abstract base class for push-messaging providers.

    Defines the single capability the dispatch rule consumes: sending one
    message to one device.
    """

    @abstractmethod
    async def send(self, token: str, payload: NotificationPayload) -> str:
        """Send one push message to a device.

        Parameters
        ----------
        token : str
            Device registration token the message is addressed to.
        payload : NotificationPayload
            Platform-neutral payload to deliver.

        Returns
        -------
        str
            Provider-assigned message identifier.

        Raises
        ------
        GatewayError
            If the provider rejects the message. Carries the provider's
            error code.
        """
        pass

    async def close(self) -> None:
        """Release provider resources. No-op by default."""
        return None
