"""
abiquo_client.v1 - Abiquo API v1
=================================

- AbiquoClient: typed resource client (API 3.10)
- model: pydantic DTOs and the media type registry
- TaskPoller: blocking wait on asynchronous tasks
"""
