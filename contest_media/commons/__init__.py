"""Commons package - settings, telemetry and infrastructure clients."""
