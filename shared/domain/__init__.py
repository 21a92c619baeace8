"""Domain value objects shared between the marina apps."""
