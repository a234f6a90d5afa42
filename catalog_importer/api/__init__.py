"""
HTTP API for previews, imports, billing and webhooks.
"""
