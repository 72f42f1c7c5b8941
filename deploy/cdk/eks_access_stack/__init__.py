from .stack import EksAccessStack

__all__ = ["EksAccessStack"]
