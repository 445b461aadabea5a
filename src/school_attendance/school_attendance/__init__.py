"""School attendance package.

This package is organized by feature modules (identities, roster, attendance,
notifications, ...) with a thin Flask controller layer on top of service and
repository layers.
"""
