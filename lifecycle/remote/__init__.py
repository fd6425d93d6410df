"""Delegation of lifecycle steps to other organizations' coordinators."""
