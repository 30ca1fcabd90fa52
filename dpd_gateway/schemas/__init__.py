"""DPD configuration and EPrint / PUDO contracts."""
