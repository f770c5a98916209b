"""Scheduling domain: orders, machines, shifts and the schedule built from them."""
