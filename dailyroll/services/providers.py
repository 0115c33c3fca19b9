"""
Interfaces for the upstream collaborators of a roll request.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from dailyroll.data_models.roll import RequestContext


class ContextProvider(ABC):
    """Resolves a chat bot request token into who is asking and where."""
    
    @abstractmethod
    async def get_context(self, token: str) -> RequestContext:
        """
        Raises:
            IdentityLookupError: when the token is invalid or the lookup fails
        """
        pass


class StreamProvider(ABC):
    """Looks up when the current broadcast of a channel started."""
    
    @abstractmethod
    async def get_stream_start(self, community_id: str) -> Optional[datetime]:
        """
        Returns:
            The broadcast start as an aware UTC datetime, or None when offline
            
        Raises:
            SessionLookupError: when the upstream lookup fails
        """
        pass
