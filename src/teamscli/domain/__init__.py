"""Adapter-free domain logic for provisioning and editing Teams apps."""
