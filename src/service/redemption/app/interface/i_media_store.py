from abc import ABC, abstractmethod


class IMediaStore(ABC):
    """Evidence photo storage"""

    @abstractmethod
    async def save(self, *, payload: bytes, name_hint: str) -> str:
        """
        Returns:
            Opaque reference stored as the purchase's check_in_photo_ref
        """
        pass

    @abstractmethod
    async def delete(self, *, ref: str) -> None:
        """Remove a stored photo; unknown references are ignored."""
        pass
