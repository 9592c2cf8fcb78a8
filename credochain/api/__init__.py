"""HTTP transport for the credential registry."""
