"""Offline-first cache backend for the Curious Minds learning platform."""
