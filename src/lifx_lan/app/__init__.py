"""Application layer: router, client session, device registry."""
