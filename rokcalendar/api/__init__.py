"""aiohttp web layer: app factory, routes and middleware."""
