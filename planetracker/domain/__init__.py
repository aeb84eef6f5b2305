"""Domain logic independent of I/O."""
