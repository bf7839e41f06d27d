"""
DishManager Backend — Abstract Broadcast Publisher
===================================================

What:  Abstract base class for the fan-out channel that carries mutation events.
Why:   DishService only needs "publish this event to everyone connected".
       Keeping that behind an interface lets the Socket.IO implementation be
       swapped for a recording publisher in tests without touching services.
How:   Concrete implementations inherit from BroadcastPublisher and implement
       publish().
Who:   Passed explicitly into every DishService mutation by the route layer.
When:  After the store transaction for a mutation has committed.
"""

from abc import ABC, abstractmethod

from dishmanager.schemas.events import DishEvent


class BroadcastPublisher(ABC):
    """
    Interface of the mutation broadcast channel.

    Contract:
        - publish() delivers the event to every currently connected client
        - Events are delivered in the order publish() is called
        - Delivery is at-most-once per connection: no acks, no replay
        - publish() never raises for delivery failures; they are logged
    """

    @abstractmethod
    async def publish(self, event: DishEvent) -> None:
        """
        Fan one event out to all connected clients.

        Args:
            event: Typed payload; its `event_name` is the channel event name.
        """
        ...

    @property
    @abstractmethod
    def connected_clients(self) -> int:
        """Number of clients currently connected to the channel."""
        ...
