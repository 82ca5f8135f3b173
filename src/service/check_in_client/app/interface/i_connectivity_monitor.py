from abc import ABC, abstractmethod
from typing import Callable


ReconnectListener = Callable[[], None]


class IConnectivityMonitor(ABC):
    @property
    @abstractmethod
    def is_online(self) -> bool:
        pass

    @abstractmethod
    def add_reconnect_listener(self, listener: ReconnectListener) -> Callable[[], None]:
        """
        Call `listener` on every offline -> online transition.

        Returns:
            A function that removes the listener
        """
        pass
