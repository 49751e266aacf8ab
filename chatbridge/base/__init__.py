"""Core building blocks shared by both backend paths.

Holds the request/message models, the error taxonomy, structured logging,
streaming events and the response bridge, the model catalog and the route
selection logic. Nothing in this package performs network I/O except the
HTTP client factory in :mod:`chatbridge.base.http`.
"""
