"""Kyuden: Legend of the Five Rings card browser and deck builder."""
