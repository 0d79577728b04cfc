"""
Networking Infrastructure

- http: aiohttp REST transport
- websocket: streaming transport, send path and receive loop
"""
