"""Domain layer for tfruntask."""
