"""Clockwork: package manager for Watch Face Format projects."""
