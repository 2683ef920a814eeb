"""Database infrastructure: declarative base, engine, immutability guards."""
