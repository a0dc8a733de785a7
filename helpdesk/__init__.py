"""Helpdesk account security and audit service."""
