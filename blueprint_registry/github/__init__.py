"""GitHub access: release lookup and manifest retrieval over HTTP."""
