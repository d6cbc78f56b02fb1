"""Domain layer — types, policy rules, and the traversal core.

This layer depends only on the standard library.
It must never import from services, infrastructure, commands, or config.
"""
