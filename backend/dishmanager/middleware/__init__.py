# Middleware package init
"""
DishManager Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every HTTP request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

Socket.IO traffic (/socket.io/) is routed by socketio.ASGIApp before it
reaches FastAPI, so none of these run for the real-time channel.
"""
