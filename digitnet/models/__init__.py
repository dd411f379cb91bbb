"""Network models for digitnet."""
from .network import AccuracyReport, Network, sigmoid, sigmoid_prime

__all__ = ["AccuracyReport", "Network", "sigmoid", "sigmoid_prime"]
