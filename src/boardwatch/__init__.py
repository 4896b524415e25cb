"""Boardwatch — resource subscriptions for Planka boards.

Sessions subscribe to planka:// resource URIs; board mutations arrive as
webhooks, get mapped to the URIs they invalidate, and fan out to every
live subscriber through a Redis pub/sub channel.
"""

__version__ = "0.1.0"
