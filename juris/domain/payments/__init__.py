"""Mobile money payments for subscriptions and client invoices"""
