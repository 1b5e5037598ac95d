"""
Listener Service - UDP liveness/control

Responsibilities:
- Receive UDP commands (EXIT, UNHEALTHY)
- Tick the health heartbeat until marked unhealthy
- Exit on SIGINT/SIGTERM
- Report state on an optional HTTP health endpoint
"""

from .service import ListenerService

__all__ = ["ListenerService"]
