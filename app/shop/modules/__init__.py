"""
Feature modules live under this package.

Each module owns its models, service functions and blueprints, and reuses the
platform primitives (auth, role gate, error taxonomy, DB session).
"""
