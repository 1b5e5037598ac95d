"""
healthping services

- listener - UDP command loop, heartbeat, signal watcher, health endpoint
"""
