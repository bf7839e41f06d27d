# Routes package init
"""
DishManager Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - dishes.py:  GET/POST      /api/dishes
                  PUT/DELETE    /api/dishes/{dishId}
                  PUT           /api/dishes/{dishId}/toggle
    - health.py:  GET           /api/health

Design Principle:
    Routes are THIN: they extract input, resolve the session and the
    broadcaster, call DishService, and wrap the result in the envelope.
"""
