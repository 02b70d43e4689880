"""
Domain Exceptions
Every failure the catalog raises derives from PostShardsError
"""


class PostShardsError(Exception):
    """Base class for catalog errors"""


class BuildError(PostShardsError):
    """Fatal index build failure; nothing has been written"""


class SourceNotFoundError(BuildError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"posts source not found: {path}")


class MalformedSourceError(BuildError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ShardFetchError(PostShardsError):
    """A shard could not be fetched or parsed"""

    def __init__(self, url: str, reason: str, status_code=None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"could not load {url}: {reason}")


class ConfigError(PostShardsError):
    """Invalid site configuration"""
