from backoffice.config.settings import settings

__all__ = ["settings"]
