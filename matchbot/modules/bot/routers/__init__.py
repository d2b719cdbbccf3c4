"""Bot routers."""
