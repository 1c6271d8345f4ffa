from abc import ABC, abstractmethod


class ITokenCodec(ABC):
    """Mints opaque reset tokens and checks their surface syntax"""

    @abstractmethod
    def generate(self) -> str:
        """Return a new unguessable token"""
        pass

    @abstractmethod
    def is_well_formed(self, raw: object) -> bool:
        """
        Cheap alphabet/length check run before any store lookup.

        A well-formed token is not necessarily a valid one.
        """
        pass
