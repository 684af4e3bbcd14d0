from .link_manager import LinkManager, normalize_url

__all__ = ["LinkManager", "normalize_url"]
