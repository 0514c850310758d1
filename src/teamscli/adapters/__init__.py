"""Adapters for the Microsoft Graph and Teams Developer Portal services."""
