"""Individual-based simulation of bacterial infection, antibiotic use and antimicrobial resistance."""

__version__ = "0.1.0"