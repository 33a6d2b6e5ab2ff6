"""Push dispatch service.

Records push notifications, submits them through the Expo push API and later
reconciles delivery receipts.
"""
