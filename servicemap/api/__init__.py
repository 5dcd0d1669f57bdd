"""
HTTP API for the service directory: configuration, storage access, services, routers and schemas.
"""
