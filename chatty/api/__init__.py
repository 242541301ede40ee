"""
HTTP surface - FastAPI application, routes and schemas
"""
