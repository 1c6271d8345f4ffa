from abc import ABC, abstractmethod
from typing import Optional

from src.core.result import Result


class INotifier(ABC):
    """Delivers the reset token to the account owner"""

    @abstractmethod
    async def send_reset_link(
        self, display_name: Optional[str], email: str, token: str
    ) -> Result[None]:
        """
        Send a password reset message.

        Returns:
            Result with None on delivery, or Error describing the failure
        """
        pass
