"""vanityurls - Serve vanity import paths that point tools at the real repository."""

from vanityurls.server import create_app, load_config

__version__ = "0.1.0"
__all__ = ["create_app", "load_config"]
