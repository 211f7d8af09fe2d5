"""Grimoire: card collection and deck building backend."""
