"""
NexaProc Documents
==================
Document numbering for quotations, delivery orders and invoices.
"""
