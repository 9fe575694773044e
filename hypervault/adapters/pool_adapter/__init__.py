from .adapter import PendingCall, PoolAdapter

__all__ = ["PendingCall", "PoolAdapter"]
