"""Core types, units and errors shared by the rfcascade engine."""
