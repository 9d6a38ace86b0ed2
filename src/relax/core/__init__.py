"""Core Module

This package contains the client and the primitives it composes.

Submodules:
    - client: Client, its configuration and builders
    - modifiers: Per-call request modifiers
    - config: TOML configuration
    - exceptions: Error types
    - logger: Logging configuration
    - http: Rate limiter, response cache, OAuth2 auth and default transport
"""
