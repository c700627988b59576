"""dashgate: access gateway for the Parse Dashboard.

Serves the dashboard configuration document (apps + master keys) only to
callers that pass the access gate: HTTPS for remote callers, loopback-only
no-auth mode, and HTTP Basic credentials checked against configured users.
"""

__version__ = "0.1.0"
