"""Grid-based stochastic fire spread (Rothermel cellular automaton)."""
