"""Propagation models feeding propagation-loss components."""

from rfcascade.environment.propagation import free_space_path_loss

__all__ = ['free_space_path_loss']
