from .timeout import RequestTimeoutMiddleware

__all__ = ["RequestTimeoutMiddleware"]
