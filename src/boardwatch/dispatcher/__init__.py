"""Event dispatcher — Redis SUBSCRIBE for instant resource-updated fan-out.

Learn: The dispatcher is a separate process that:
1. Listens on the shared <prefix>.events pub/sub channel
2. Resolves each event to the resource uris it touches
3. Looks up live subscribers in the registry and hands one
   notification per session to the delivery transport

Run it as its own worker; listen() blocks for the life of the process.
"""
