"""Rate limiting adapters.

The contact endpoint starts with a process-local limiter; the abstraction
allows moving to a shared store without touching the API layer.
"""
