"""CredoChain credential registry service."""
