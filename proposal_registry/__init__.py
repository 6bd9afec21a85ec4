"""Proposal-and-voting registry service."""
