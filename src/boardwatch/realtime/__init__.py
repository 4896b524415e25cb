"""Real-time infrastructure — Redis connection + the shared events channel.

Learn: Events flow through one channel:
1. Webhook ingest → Redis PUBLISH (already resolved to uris)
2. Redis SUBSCRIBE → EventDispatcher → notification transport

This decouples the HTTP process receiving board webhooks from the
long-lived dispatcher workers that fan events out to sessions.
"""
