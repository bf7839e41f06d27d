# Services package init
"""
DishManager Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - BroadcastPublisher (abstract): Interface of the mutation fan-out channel
    - SocketIOBroadcaster: Concrete channel on a python-socketio AsyncServer
    - DishService: List + mutations; publishes one event per committed write
"""
