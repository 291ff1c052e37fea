"""Service helpers built on the request client."""
