"""
Service Board

Derives a Kanban board of service work items from orders, workflow
definitions and the service catalog.
"""

__version__ = "0.1.0"
