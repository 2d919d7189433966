"""Flow Tokens - random access tokens for users and posts.

Every user, and every post of a tracked type, carries a short URL-safe
token under the ``flow_rand_tok`` meta key. Tokens can be resolved back
to the entity that holds them.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
