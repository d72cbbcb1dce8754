"""
Anonymous feed backend and client.

The backend is a FastAPI application exposing post and comment procedures
over a JSON RPC endpoint, with SQLAlchemy and in-memory storage clients. The
client side wraps the RPC endpoint and keeps the one-post-at-a-time feed state.
"""
