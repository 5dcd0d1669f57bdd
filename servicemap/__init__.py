"""
Package marker for the service map application.
It groups the geo core, the shared settings/storage helpers, and the HTTP API under one import path.
"""
