"""Core of Confio: store, policy, lifecycle and the per-area service functions."""
