from .consts import VERSION

__all__ = ["VERSION"]
