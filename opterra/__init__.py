"""Opterra: deterministic water-heater risk scoring."""
