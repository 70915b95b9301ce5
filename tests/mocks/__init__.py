from .mock_platform import MockAdapter

__all__ = ["MockAdapter"]
