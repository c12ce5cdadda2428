"""Voice-interview call session engine."""
