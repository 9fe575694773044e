from .adapter import TokenAdapter

__all__ = ["TokenAdapter"]
