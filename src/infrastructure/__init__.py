"""
Infrastructure Components

- networking: aiohttp REST transport, WebSocket transport / send path / receive loop
- logging: structured logger with console and file backends
- exceptions: error taxonomy shared by every layer
"""
