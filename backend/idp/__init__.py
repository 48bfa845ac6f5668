"""Pluggable OAuth identity providers.

Turns per-deployment configuration into a fixed set of provider
integrations that all expose the same contract:
- settings() and scopes() for building the authorization redirect
- get_user() for turning an access token into a normalized Identity
"""

__version__ = "0.1.0"
