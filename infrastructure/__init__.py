"""Infrastructure layer — operational concerns for the log-mel feature service.

Modules:
    metrics     Prometheus metrics registry.
"""
