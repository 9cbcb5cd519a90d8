"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- numbering: Sequential document identifiers (WO, RFP, BID, INV)
- work_orders: Work order management
- rfps: RFP and bid management
- invoices: Invoice creation and totals
- notifications: In-app notification records
"""
