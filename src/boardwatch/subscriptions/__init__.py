"""Subscription index — which sessions watch which resource URIs.

Learn: Two reciprocal Redis sets back every subscription:
1. uri → sessions (read on every dispatch)
2. session → uris (carries the session's liveness TTL, used for teardown)

Nothing wraps the two writes in a transaction. Stale entries in the
uri index are repaired lazily whenever get_subscribers() reads them.
"""
