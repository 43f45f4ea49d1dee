from .key import KeyInfo, KeyRecord

__all__ = ["KeyInfo", "KeyRecord"]
