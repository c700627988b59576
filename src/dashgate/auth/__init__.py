"""Authentication for the dashboard config endpoint.

Learn: two pieces, used in sequence by the access gate:
1. basic.py → pull (username, password) out of an HTTP Basic header
2. authenticator.py → match that pair against the configured users,
   plain-text or bcrypt-hashed (password.py)
"""
