"""Subscription domain: plan state, quotas and payment validation"""
