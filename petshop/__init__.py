"""Pet shop backend: per-user shopping cart and favorites service."""
