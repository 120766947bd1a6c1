"""
Magpie - Declarative Turn-Based Game Engine

A rules-execution engine for games described as data.
The engine loads a game definition and provides:
- An expression language (MXL) evaluated against game state
- A flow interpreter for events, conditions, input and phases
- Per-player turn rotation and signal-based phase/game termination
"""

__version__ = "0.1.0"
