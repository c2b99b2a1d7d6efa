"""Turing Lab: periodic-grid reaction-diffusion simulation with live streaming."""

__version__ = "0.1.0"
