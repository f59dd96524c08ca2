"""API routers for the Threadboard API."""
