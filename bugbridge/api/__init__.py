"""Bridge HTTP API layer.

This package provides the Falcon ASGI application serving the probe
endpoints and the GitHub webhook that feeds tracker comments into the
bridge.

Usage
-----
Create and run the application::

    from bugbridge.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # full bridge mode

"""

from bugbridge.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
